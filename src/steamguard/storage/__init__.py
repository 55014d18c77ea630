from .mafile import MAFILE_SUFFIX, MaFileStore, record_file_name
from .serialization import deserialize_account, serialize_account

__all__ = [
    "MAFILE_SUFFIX",
    "MaFileStore",
    "deserialize_account",
    "record_file_name",
    "serialize_account",
]

import re


# Process folders: "aaaa.nnnnnnn" optionally followed by a free-form suffix
PROCESS_ID_PATTERN = re.compile(r"^\d{4}\.\d{7}.*")
YEAR_PARTITION_PATTERN = re.compile(r"^\d{4}$")

# Eligible files
HASHLOG_PREFIX = "hashlog."
LISTING_FILENAME = "Lista de Arquivos.csv"
DEFAULT_MAX_DEPTH = 5

# Archive layout
ARCHIVE_PREFIX = "anexo-laudo-"
ARCHIVE_SUFFIX = ".zip"
ROOT_LEAF_SENTINEL = "raiz"
MANIFEST_ENTRY_NAME = "hashes.txt"
ROOT_HASH_ENTRY_NAME = "root_hash.txt"
MANIFEST_ENCODING = "utf-8"
ZIP_COMPRESSLEVEL = 9

DEFAULT_READ_SIZE = 1_048_576  # 1 MiB

# Service defaults
DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 3001

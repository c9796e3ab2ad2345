"""Constants shared across ingestion modules.

Field names of the stored document schema live here so the adapter
and the test fixtures agree on one spelling.
"""

from __future__ import annotations

# Stored document fields.
FIELD_CREATED = "created"
FIELD_R_PIT = "rPit"
FIELD_UUID = "uuid"
FIELD_ENCRYPTED_DATA_SHARES = "encryptedDataShares"
FIELD_DATA_SHARE_METADATA = "dataShareMetadata"
FIELD_ENCRYPTION_KEY_ID = "encryptionKeyId"
FIELD_ENCRYPTED_PAYLOAD = "encryptedPayload"
FIELD_METRIC_NAME = "metricName"
FIELD_NUMBER_OF_SERVERS = "numberOfServers"
FIELD_BINS = "bins"
FIELD_HAMMING_WEIGHT = "hammingWeight"
FIELD_PRIME = "prime"
FIELD_EPSILON = "epsilon"

# Output layout.
PHA_INDEX = 0
FACILITATOR_INDEX = 1
NUMBER_OF_SHARES = 2
OUTPUT_FILE_SUFFIX = ".parquet"
DEFAULT_HEADER_OUTPUT = "ingestionHeader"
BATCH_NAME_PREFIX = "BatchUuid="
PACKET_SCHEMA_VERSION = "1"
HASH_ALGORITHM = "sha256"

# Runtime defaults.
DEFAULT_RANDOM_SEED = 42
DEFAULT_MAX_WORKERS = 4
DEFAULT_MIN_BATCH_SIZE = 0
SOURCE_KIND_JSONL = "jsonl"
SOURCE_KIND_FIRESTORE = "firestore"
SUPPORTED_SOURCE_KINDS = (SOURCE_KIND_JSONL, SOURCE_KIND_FIRESTORE)
SUPPORTED_EXPORT_EXTENSIONS = (".jsonl", ".json")

# Counter names reported at run completion.
COUNTER_INVALID_DOCUMENTS = "invalidDocuments"
COUNTER_METRIC_MATCHED = "metricMatched"
COUNTER_METRIC_UNMATCHED = "metricUnmatched"
COUNTER_OUTSIDE_WINDOW = "outsideWindow"
COUNTER_DATA_SHARE_INCLUDED = "dataShareIncluded"
COUNTER_HETEROGENEOUS_BATCHES = "heterogeneousBatches"
COUNTER_BATCHES_WITHHELD = "batchesWithheld"

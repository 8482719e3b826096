"""Constants of the storage and host inspection adapters."""

POOL_RECYCLE_SECONDS = 3600
COMMAND_TIMEOUT_SECONDS = 60

# Deterministic constraint names, e.g. uq_users_tenant
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

# Host facts
CPUINFO_PATH = "/proc/cpuinfo"
UNKNOWN = "unknown"
PERCENT_PRECISION = 2

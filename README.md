# patchcore

A library of building blocks for a patch-management service that tracks
which package updates and advisories apply to registered systems.

## What it contains

- **RPM package names** (`patchcore.rpm`): `parse_nevra` and
  `parse_name_evra` turn `name-[epoch:]version-release.arch` strings into
  `Nevra` records (raising `NevraError` when they cannot); `vercmp` compares
  version strings the way RPM does, and `Nevra.cmp` orders packages by name
  and then by epoch-version-release-arch.
- **Update service documents** (`patchcore.vmaas`): dataclasses for update,
  errata, package-list and repository requests and responses, with
  `from_dict` / `to_dict` conversion to and from JSON-shaped dictionaries.
- **Merging update responses** (`patchcore.merge`): `merge_updates` merges
  two sorted update lists without duplicates; `merge_vmaas_responses` merges
  two responses and, through `remove_non_latest_packages`, keeps only the
  newest installed package of each name. The inputs are left unchanged.
- **Inventory and access documents**: `patchcore.inventory.SystemProfile`
  (with `OperatingSystem`, `YumRepo`, `DnfModule`, `Rhsm`) and
  `patchcore.rbac.AccessPagination` with its `permissions()` list.
- **Database records** (`patchcore.models`): dataclasses for the service's
  tables, each carrying its `table_name`, plus `parse_baseline_config`, which
  reads a stored baseline configuration into a `BaselineConfig`.
- **Queue messages** (`patchcore.message`, `patchcore.platform_event`,
  `patchcore.payload_tracker`, `patchcore.queue`): `KafkaMessage`,
  `message_from_json`, a `Writer` protocol and error counters;
  `PlatformEvent` with JSON conversion; `write_inventory_events` and
  `write_eval_events`, which group systems by account and split them into
  batches (default size from `MSG_BATCH_SIZE`, 4000);
  `write_payload_tracker_events`; `make_message_handler`,
  `make_retrying_handler` (exponential backoff), `spawn_reader` (runs a
  reader in a thread) and `send_messages`. `MemoryWriter` and
  `CountingReaderFactory` are in-memory stand-ins for tests.
- **Notifications** (`patchcore.notification`): `make_notification` builds a
  `Notification` about a system from a platform event.
- **SQL helpers**: `patchcore.query.get_query_attrs` and `must_get_select`
  derive column-to-expression maps and `SELECT` lists from dataclass field
  metadata (`column`, `query`, `order_query`, `embed`);
  `patchcore.sql.build_bulk_insert` builds a multi-row
  `INSERT ... RETURNING *` statement with `?` placeholders, and
  `on_conflict_update`, `on_conflict_update_multi` and
  `on_conflict_do_update_expr` build its `ON CONFLICT` clause.
- **Service utilities**:
  - `patchcore.envutil`: typed environment variable access, `load_env_files`
    for dotenv files, `size_str`, `since_str`, `is_valid_uuid`.
  - `patchcore.logs`: `configure_logging` (reads `LOG_LEVEL` and
    `LOG_STYLE=json`), `log("key", value).info(...)` for key/value fields,
    the `log_panics` context manager, `CapturingHandler` and `log_progress`.
  - `patchcore.timestamps`: RFC 3339 formatting and parsing with and without
    `Z`, and `handle_signals`, which sets an event on SIGINT/SIGTERM.
  - `patchcore.http_retry.http_call_retry`: retries a call on errors or on
    chosen status codes, raising `HttpRetryError` when it gives up.
  - `patchcore.identity.parse_identity`: decodes a base64 identity header.
  - `patchcore.web`: `load_param_int` and `load_limit_offset` for paging
    parameters, and `run_server`, which serves a WSGI app until an event is
    set.
  - `patchcore.api_client.ApiClient`: sends JSON requests with default
    headers over `requests` and returns the decoded answer, raising
    `ApiError` on failure.

## What it does not do

There is no command to run and no complete service here. The package holds
no database connection: the SQL helpers only build statement text and
parameter lists. It has no message-queue client either: readers and writers
are protocols, with in-memory implementations only. It exposes no metrics
and defines no HTTP routes or handlers.

## Installation

```
pip install .
```

## Example

```python
from patchcore.rpm import parse_nevra

a = parse_nevra("firefox-1:76.0.1-1.fc31.x86_64")
b = parse_nevra("firefox-1:77.0.1-1.fc31.x86_64")
print(a.name, a.epoch)     # firefox 1
print(b.cmp(a))            # 1
print(a.evra_string(True)) # 1:76.0.1-1.fc31.x86_64
```

## Running the tests

```
pip install ".[test]"
pytest
```
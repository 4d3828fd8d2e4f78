# casanas

Building blocks for a small home server: a SQLite store for samba shares,
remote samba connections, browser peers, dependencies and notifications;
generation of the samba configuration; stream wrappers that stop a copy when
it is cancelled; search suggestions from public search engines; and a
CPU, memory and network utilization report.

## Install

```
pip install casanas
```

The tests use pytest and responses, available through the `test` extra:

```
pip install "casanas[test]"
```

## Modules

- `casanas.models`: record dataclasses `ConnectionRecord`, `PeerRecord`,
  `AppNotify`, `RelyRecord` and `ShareRecord`, each with `to_dict()`, and the
  enums `NotifyState`, `NotifyType`, `NotifyClass`, `FriendState`,
  `DownloadState`, `SearchType`, `TaskType` and `TaskState`.
- `casanas.database`: `Database`, a thread-safe SQLite connection that creates
  the tables on open, with `execute`, `query` (rows as dictionaries) and
  `close`; it is also a context manager.
- `casanas.repositories`:
  - `ConnectionsService`: list, look up by host or id, create, update and delete
    connections; `mount_samba` and `unmount_samba` run `mount -t cifs` and
    `umount` and raise `OSError` when they fail.
  - `PeerService`: look up peers by name, user agent or id, list them most
    recently updated first, create and delete.
  - `RelyService`: create, get and delete by custom id.
  - `NotifyService`: add, update, get and delete notification logs, list the
    dynamic or unread logs of a class, `mark_read` (an id of `"0"` marks every
    log), and an in-memory map of the latest system status values
    (`set_system_temp_data`, `system_temp_map`).
- `casanas.shares`: `SharesService` stores shares, writes `smb.casa.conf` in its
  samba directory after each change and runs `RestartSMBD` from the helper
  script; `init_samba_config` replaces an unmanaged `smb.conf` with a managed
  one, keeping the old file as `smb.conf.bak`. `render_shares_config` returns the
  share sections as text.
- `casanas.peers`: `get_peer_id` reads the `peerid` cookie, `get_ip` picks the
  first `X-Forwarded-For` address and folds IPv6 loopback forms to
  `127.0.0.1`, `name_from_record` builds a `PeerName` from a stored peer.
- `casanas.fileops`: `CancellableReader` and `CancellableWriter` raise
  `CancelledError` once a `threading.Event` is set; `mount_points` reads a
  mountinfo file and `is_mounted` checks a path against it and against the mount
  points of stored connections.
- `casanas.search`: `search` queries bing, google, baidu, duckduckgo and
  startpage in parallel for suggestions; `parse_suggestions` reads one engine's
  response; `agent_search` fetches a URL and returns its body.
- `casanas.system`: `SystemService` for creating files and directories,
  renaming, directory listings (`DirEntry`), CPU temperature, power, use and core
  count, memory and disk use, network cards and counters, the service log,
  reboot and shutdown; `device_all_ips` lists non-loopback addresses.
- `casanas.utilization`: `cpu_model`, `net_status` and `utilization`, which
  combines CPU, memory and network figures with extra status values.

## Example

```python
from casanas.database import Database
from casanas.repositories import PeerService
from casanas.models import PeerRecord

with Database(":memory:") as db:
    peers = PeerService(db)
    peers.create(PeerRecord(id="peer-1", display_name="Linux Firefox"))
    print([p.display_name for p in peers.list()])
```

Stopping a copy from another thread:

```python
import io
import threading
from casanas.fileops import CancellableReader, CancellableWriter, CancelledError

stop = threading.Event()
reader = CancellableReader(stop, io.BytesIO(b"data"))
writer = CancellableWriter(stop, io.BytesIO())
stop.set()
try:
    writer.write(reader.read(4))
except CancelledError:
    print("copy cancelled")
```

## What it does not do

casanas is a library only. It has no HTTP server or API routes, no command
line program, and no WebSocket peer messaging. It does not queue or run file
move and copy jobs, does not publish notifications to a message bus, and does
not mount cloud storage. Network card names and states, and the samba restart,
come from a `helper.sh` script in the configured shell path, which the package
does not provide.
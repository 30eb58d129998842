# kubeutil

Small, dependency-free utilities for Python 3.10 and later. Everything is a
library; the package installs no commands.

## Modules

- `kubeutil.field`: `Path`, a path from a root to a nested field that renders as
  `root.first.second[0][key]`. Start one with `new_path("root")` (extra names
  extend it), then derive new paths with `child`, `index` and `key`; `root()`
  returns the first element.
- `kubeutil.integer`: `int_max`, `int_min`, `int32_max`, `int32_min`,
  `int64_max`, `int64_min`, and `round_to_int32`, which rounds halves away
  from zero.
- `kubeutil.env`: `get_string`, `get_int`, `get_float` and `get_bool` read an
  environment variable and return the default when it is not set. A value that
  is set but cannot be parsed raises `ValueError` (for example
  `parsing "not-a-bool": invalid syntax`). `get_bool` accepts `1`, `t`, `T`,
  `TRUE`, `true`, `True` and `0`, `f`, `F`, `FALSE`, `false`, `False`.
- `kubeutil.ring_buffer`: `RingGrowing(initial_size)`, a FIFO ring buffer that
  doubles its capacity when full. `write_one` appends, `read_one` removes and
  returns the oldest item and raises `IndexError` when empty. `len()` gives the
  number of items and `capacity` the number of slots. Not thread safe.
- `kubeutil.clock`: the abstract `PassiveClock`, `Clock` and `Timer`, and the
  real `RealClock` and `RealTimer`. Durations are `timedelta` or seconds;
  `after`, `tick` and timers deliver times on a `queue.Queue` holding at most one
  pending value, and `tick` returns `None` for a non-positive interval.
- `kubeutil.consistent_read`: `consistent_read(filename, attempts)` reads a
  file again until two reads in a row match, raising `InconsistentReadError`
  otherwise. `read_at_most(reader, limit)` reads up to `limit` bytes and raises
  `LimitReachedError` (with what was read in `data`) when the limit is reached.
- `kubeutil.diff`: `string_diff`, `object_diff` (via JSON),
  `object_print_diff` (via `repr`), `object_reflect_diff` (field by field over
  dataclasses, lists, tuples and dicts), `limit`, and
  `object_print_side_by_side`.
- `kubeutil.keymutex`: the abstract `KeyMutex` and `HashedKeyMutex`, returned by
  `new_hashed(n)`, which hashes string keys (FNV-1a) onto `n` locks, or one per
  CPU when `n <= 0`. Different keys may share a lock.
- `kubeutil.executor`: `new_executor()` returns an `Executor` whose `command`,
  `command_context` (with a timeout) and `look_path` build and locate programs.
  A `Cmd` has `run`, `output`, `combined_output`, `start`, `wait`,
  `stdout_pipe`, `stderr_pipe` and `stop`, and the plain attributes `dir`,
  `stdin`, `stdout`, `stderr` and `env`. A non-zero exit raises
  `ExitErrorWrapper`, a missing program raises `ExecutableNotFoundError`, and a
  command that runs past its timeout raises `DeadlineExceededError`.
  `CodeExitError` pairs an error with an exit code.

## Examples

```python
from kubeutil.field import new_path

p = new_path("spec").child("containers").index(0).child("image")
print(p)  # spec.containers[0].image
```

```python
from kubeutil.executor import new_executor

out = new_executor().command("echo", "hello").combined_output()
assert out == b"hello\n"
```

```python
from kubeutil.ring_buffer import RingGrowing

ring = RingGrowing(1)
for item in range(3):
    ring.write_one(item)
print(ring.read_one())  # 0
print(len(ring), ring.capacity)  # 2 4
```

## What it does not do

There are no fake clocks or fake executors for tests; `kubeutil.clock` and
`kubeutil.executor` provide only the real implementations and their interfaces.
There is no cache and no file-system watcher.

## Running the tests

```
pip install -e ".[test]"
pytest
```
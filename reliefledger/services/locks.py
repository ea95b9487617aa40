# reliefledger/services/locks.py
"""Per-key mutual exclusion."""
import threading
import weakref
from typing import Hashable


class KeyedLock:
     """
     Hands out one lock per key. Calls on the same key serialize,
     calls on different keys proceed in parallel.

     Locks are held weakly: once no caller holds or waits on a key's lock it
     is dropped, so keys seen once (e.g. unknown ids) do not accumulate.
     """

     def __init__(self):
          self._guard = threading.Lock()
          self._locks: "weakref.WeakValueDictionary[Hashable, threading.RLock]" = weakref.WeakValueDictionary()

     def __call__(self, key: Hashable) -> threading.RLock:
          with self._guard:
               lock = self._locks.get(key)
               if lock is None:
                    lock = threading.RLock()
                    self._locks[key] = lock
               return lock

     def __len__(self) -> int:
          return len(self._locks)

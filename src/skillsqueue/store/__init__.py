"""Persistent queue and settings stores.

The queue store is the single owner of the ``nowServing`` / ``queue`` lists.
Every read-modify-write of those lists must run inside
:meth:`QueueStore.locked` so concurrent tasks cannot interleave.
"""

from skillsqueue.store.queue_store import ChangeListener, QueueStore
from skillsqueue.store.settings_store import SettingsStore

__all__ = ["ChangeListener", "QueueStore", "SettingsStore"]

"""
Epoch resolution for registered datasets.

The cache is keyed by a fixed set of dataset names given at startup. An entry
starts empty, is filled from the metadata schema on the first lookup that
returns epochs, and is never refreshed after that. Unregistered names always
resolve to no epochs, whatever the store holds.
"""

import logging
import threading
from typing import Dict, List, Optional, Sequence

from .errors import DatasetNotFoundError, InvalidEpochError

logger = logging.getLogger(__name__)


class EpochCache:
    """Process-lifetime cache of dataset name -> epochs (newest first)."""

    def __init__(self, store, datasets: Sequence[str]):
        self.store = store
        self._epochs: Dict[str, List[str]] = {name: [] for name in datasets}
        self._lock = threading.Lock()

    @property
    def datasets(self) -> List[str]:
        return list(self._epochs)

    def resolve(self, dataset: str) -> List[str]:
        """
        Get the epochs of a dataset, newest first.

        Args:
            dataset: Dataset name

        Returns:
            Epoch list; empty for unregistered datasets, or while the store
            has no epochs for it (an empty result is re-queried next time)

        Raises:
            StoreUnavailableError: if the metadata lookup fails
        """
        if dataset not in self._epochs:
            return []

        cached = self._epochs[dataset]
        if cached:
            return list(cached)

        epochs = self.store.get_epochs(dataset)
        with self._lock:
            # first non-empty result wins
            if not self._epochs[dataset]:
                self._epochs[dataset] = list(epochs)
                if epochs:
                    logger.info(f"Cached {len(epochs)} epochs for {dataset}")
            return list(self._epochs[dataset])

    def require(self, dataset: str, epoch: Optional[str] = None) -> str:
        """
        Resolve the epoch a request should read.

        Returns the newest epoch when none is given, otherwise the given
        epoch once it is confirmed to exist.
        """
        epochs = self.resolve(dataset)
        if not epochs:
            raise DatasetNotFoundError()
        if not epoch:
            return epochs[0]
        if epoch not in epochs:
            raise InvalidEpochError()
        return epoch

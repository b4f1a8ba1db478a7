"""
Client for the WikiLoop Explorer API.

Usage:
    client = ExplorerClient("http://localhost:8081")
    epochs = client.get_epochs("missingdateofbirth")
    rows = client.advanced_search("missingdateofbirth", epochs[0], items="Q42", languages=["en"])
"""

import requests
from typing import Dict, List, Optional


class ExplorerClient:
    """Thin wrapper over the HTTP routes; every method returns decoded JSON."""

    def __init__(self, api_url: str = "http://localhost:8081"):
        """
        Initialize API client.

        Args:
            api_url: Base URL of the API server
        """
        self.api_url = api_url.rstrip('/')
        self.session = requests.Session()

    def _get(self, endpoint: str, params: Dict = None):
        """Make GET request to API."""
        url = f"{self.api_url}{endpoint}"
        response = self.session.get(url, params=params)
        response.raise_for_status()
        return response.json()

    def _post(self, endpoint: str, payload: Dict):
        """Make POST request to API."""
        url = f"{self.api_url}{endpoint}"
        response = self.session.post(url, json=payload)
        response.raise_for_status()
        return response.json()

    @staticmethod
    def _epoch_param(epoch: Optional[str]) -> Optional[Dict]:
        return {"epoch": epoch} if epoch else None

    # ----------------------------------------------------------------
    # Datasets
    # ----------------------------------------------------------------

    def list_datasets(self) -> List[str]:
        """Get the names of all published datasets."""
        return self._get("/dslist")

    def get_dataset(self, dsname: str, epoch: Optional[str] = None) -> List[Dict]:
        """
        Get every row of a dataset epoch.

        Args:
            dsname: Dataset name
            epoch: Epoch token (defaults to the newest)
        """
        if epoch:
            return self._get(f"/ds/{dsname}/{epoch}")
        return self._get(f"/ds/{dsname}")

    def get_epochs(self, dsname: str) -> List[str]:
        """Get the epochs of a dataset, newest first."""
        return self._get(f"/dsepoch/{dsname}")

    def get_stats(self, dsname: str, epoch: Optional[str] = None) -> List[Dict]:
        """Get the latest update-count stats of a dataset epoch."""
        return self._get(f"/dsstats/{dsname}", params=self._epoch_param(epoch))

    def get_leaderboard(self, dsname: str, epoch: Optional[str] = None) -> List[Dict]:
        """Get users ranked by number of logged edits."""
        return self._get(f"/dsleaderboard/{dsname}", params=self._epoch_param(epoch))

    # ----------------------------------------------------------------
    # Game logs
    # ----------------------------------------------------------------

    def get_accumulated_edits(self, dsname: str, epoch: str) -> List[Dict]:
        return self._get(f"/gamelogs/accumulateedits/{dsname}/{epoch}")

    def get_decisions(self, dsname: str, epoch: str) -> List[Dict]:
        return self._get(f"/gamelogs/decisions/{dsname}/{epoch}")

    # ----------------------------------------------------------------
    # Search
    # ----------------------------------------------------------------

    def advanced_search(
        self,
        dsname: str,
        epoch: str,
        items: str = "",
        languages: Optional[List[str]] = None
    ) -> List[Dict]:
        """
        Filter a missing-value dataset epoch.

        Args:
            dsname: Dataset name
            epoch: Epoch token
            items: Comma-separated entity ids (e.g., 'Q42, Q7')
            languages: Language codes, or ['all']
        """
        payload = {
            "dsname": dsname,
            "epoch": epoch,
            "items": items,
            "languages": languages or ["all"],
        }
        return self._post("/advancedsearch", payload)

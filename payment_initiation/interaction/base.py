"""
Collaborator interfaces for the human side of SCA.

The SCA flow only produces URLs and challenge data. Showing them to the PSU
and collecting the authorisation code returned to the redirect URI is left
to these collaborators, so the flow can run from a terminal, behind a
callback server, or under test.
"""

from abc import ABC, abstractmethod
from typing import Optional


class ScaRenderer(ABC):
    """Presents SCA URLs to the PSU."""

    @abstractmethod
    def open_url(self, url: str) -> None:
        """Open a redirect SCA URL for the PSU (e.g. in the default browser)."""
        ...

    @abstractmethod
    def show_qr(self, data: str) -> None:
        """Render data (a decoupled SCA deep link) as a scannable QR code."""
        ...


class AuthorisationCodeSource(ABC):
    """Supplies the OAuth authorisation code returned to the redirect URI."""

    @abstractmethod
    async def get_code(self, state: str) -> Optional[str]:
        """
        Wait for the authorisation code belonging to state.

        Returns:
            The code, or None/empty when the PSU did not provide one.
        """
        ...

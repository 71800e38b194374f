from abc import ABC, abstractmethod
from typing import Any


class IClient(ABC):
    """Interface every source client builder implements"""

    @abstractmethod
    def get_client(self) -> Any:
        """Return the underlying transport client"""

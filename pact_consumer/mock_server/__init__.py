# Simulated provider: Pact mock service client and process management
from .client import MockServer, MockServiceClient, TransferProtocol
from .process import MockServiceProcess

__all__ = ["MockServer", "MockServiceClient", "MockServiceProcess", "TransferProtocol"]

"""Application use cases."""

from ventafacil.application.use_cases.record_remote_sale import (
    RecordRemoteSaleResult,
    RecordRemoteSaleUseCase,
)

__all__ = ["RecordRemoteSaleUseCase", "RecordRemoteSaleResult"]

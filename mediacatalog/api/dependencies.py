from fastapi import Request

from mediacatalog.core.readiness import ReadinessGate
from mediacatalog.services.ingestion import IngestionOrchestrator
from mediacatalog.services.interactions import InteractionService
from mediacatalog.services.reader import CatalogReader


def wire_services(state, gate: ReadinessGate, store, storage) -> None:
    """Attach the request-path services to ``app.state``."""
    state.gate = gate
    state.orchestrator = IngestionOrchestrator(gate, storage, store)
    state.interactions = InteractionService(gate, store)
    state.reader = CatalogReader(gate, store)


def get_gate(request: Request) -> ReadinessGate:
    return request.app.state.gate


def get_orchestrator(request: Request) -> IngestionOrchestrator:
    return request.app.state.orchestrator


def get_interactions(request: Request) -> InteractionService:
    return request.app.state.interactions


def get_reader(request: Request) -> CatalogReader:
    return request.app.state.reader

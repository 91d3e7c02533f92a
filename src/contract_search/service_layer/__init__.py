"""Service layer - the live query controller consumed by the UI layer."""

from contract_search.service_layer.live_search import LiveSearchController, build_live_search


__all__ = ["LiveSearchController", "build_live_search"]

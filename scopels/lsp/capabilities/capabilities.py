"""
LSP Capabilities Manager

Capabilities are plugins that answer LSP feature requests. The manager
owns them, asks each whether it can handle a request and aggregates the
answers. Handlers are isolated: one capability failing is logged and
does not fail the request.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from lsprotocol.types import (
    CompletionList,
    CompletionParams,
    LogMessageParams,
    MessageType,
)


if TYPE_CHECKING:
    from scopels.lsp.scope_language_server import ScopeLanguageServer


class Capability(ABC):
    """
    Base class for all LSP capability handlers.

    Each capability decides per request whether it applies.
    """

    def __init__(self, server: ScopeLanguageServer) -> None:
        self.server = server

    def register(self) -> None:
        """
        Hook up anything the capability needs once the server is
        initialized (text sync hooks and the like).
        """
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique name for this capability."""
        pass

    @property
    @abstractmethod
    def description(self) -> str:
        """Human-readable description of what this capability does."""
        pass

    @abstractmethod
    async def can_handle(self, params) -> bool:
        """Check if the capability can handle the request."""
        pass


class CompletionCapability(Capability):
    """Base class for completion capabilities."""

    @abstractmethod
    async def can_handle(self, params: CompletionParams) -> bool:
        pass

    @abstractmethod
    async def complete(self, params: CompletionParams) -> CompletionList:
        """
        Provide completion items.

        Only called if can_handle() returns True.
        """
        pass


class CapabilityManager:
    """
    Central manager for all LSP capabilities.

    Usage:
        manager = CapabilityManager(server)
        manager.register_all()

        result = await manager.handle_completion(params)
    """

    def __init__(
        self,
        server: ScopeLanguageServer,
        capabilities: dict[str, Capability] | None = None,
    ):
        self.server = server

        if capabilities is None:
            from scopels.lsp.capabilities.scope_completion import (
                ScopeCompletionCapability,
            )

            capabilities = {
                "scope_completion": ScopeCompletionCapability(server),
            }

        self.capabilities = capabilities
        self._registered = False

    def register_all(self) -> None:
        """Register all capabilities with the server."""
        if self._registered:
            return

        for capability in self.capabilities.values():
            capability.register()

        self._registered = True

    def get_capabilities_by_type(self, capability_type: type) -> list[Capability]:
        """Get all capabilities of a specific type (e.g., all CompletionCapability)."""
        return [
            cap
            for cap in self.capabilities.values()
            if isinstance(cap, capability_type)
        ]

    async def handle_completion(self, params: CompletionParams) -> CompletionList:
        """
        Aggregate completion items from all capable handlers.

        Labels already returned by an earlier capability are not
        repeated. The list is incomplete if any handler said so.
        """
        items = []
        labels: set[str] = set()
        is_incomplete = False

        for capability in self.get_capabilities_by_type(CompletionCapability):
            try:
                if not await capability.can_handle(params):
                    continue
                result = await capability.complete(params)  # pyright: ignore
            except Exception as e:
                self.server.window_log_message(
                    LogMessageParams(
                        type=MessageType.Error,
                        message=f"Completion error in {capability.name}: {e}"
                    )
                )
                continue

            is_incomplete = is_incomplete or result.is_incomplete
            for item in result.items:
                if item.label in labels:
                    continue
                labels.add(item.label)
                items.append(item)

        return CompletionList(is_incomplete=is_incomplete, items=items)

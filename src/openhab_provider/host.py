from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union

import httpx

from openhab_provider.bootstrap import load_builtin_resources
from openhab_provider.core.diagnostics import Diagnostic, Diagnostics
from openhab_provider.core.logger import get_logger, push_resource, reset_resource
from openhab_provider.core.values import AttributeValue
from openhab_provider.framework.plan import PlanAction, plan_resource
from openhab_provider.framework.registry import ResourceRegistry
from openhab_provider.framework.resource import ResourceResponse
from openhab_provider.framework.schema import decode_config, encode_state, validate_config
from openhab_provider.models.config_document import ConfigDocument, ResourceConfig
from openhab_provider.provider import OpenhabProvider, ProviderContext

STATE_VERSION = 1

logger = get_logger(__name__)


@dataclass
class ResourceChange:
    address: str
    action: PlanAction
    changed_paths: List[str] = field(default_factory=list)
    replace_paths: List[str] = field(default_factory=list)


@dataclass
class HostResult:
    diagnostics: Diagnostics = field(default_factory=Diagnostics)
    state: Dict[str, Any] = field(default_factory=dict)
    changes: List[ResourceChange] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.diagnostics.has_error()


def _scoped(diagnostics: Diagnostics, address: str) -> List[Diagnostic]:
    scoped = []
    for d in diagnostics:
        path = f"{address}.{d.attribute_path}" if d.attribute_path else address
        scoped.append(Diagnostic(d.severity, d.summary, d.detail, attribute_path=path))
    return scoped


def empty_state() -> Dict[str, Any]:
    return {"version": STATE_VERSION, "resources": {}}


class ProviderHost:
    """
    Drives the provider the way a plugin host would: validate, plan, apply, destroy.

    State is a plain dict ``{"version": 1, "resources": {address: {"type": ..., "attributes": {...}}}}``
    owned by the caller; the host never touches the filesystem.

    Example:
        >>> host = ProviderHost(document, state=previous_state)
        >>> result = host.apply()
        >>> if result.ok:
        ...     save(result.state)
    """

    def __init__(
        self,
        document: Union[ConfigDocument, Dict[str, Any]],
        state: Optional[Dict[str, Any]] = None,
        *,
        provider: Optional[OpenhabProvider] = None,
        http_client: Optional[httpx.Client] = None,
    ):
        if isinstance(document, dict):
            document = ConfigDocument.model_validate(document)
        self.document = document
        self.state = state if state is not None else empty_state()
        self.provider = provider or OpenhabProvider()
        self._http_client = http_client
        load_builtin_resources()

    # -------------------------------------------------------------------------
    # Public operations
    # -------------------------------------------------------------------------

    def validate(self) -> HostResult:
        result = HostResult(state=self.state)
        for resource_cfg in self.document.resources:
            self._decode_resource(resource_cfg, result.diagnostics)
        return result

    def plan(self) -> HostResult:
        """Diff configuration against the given state without talking to openHAB."""
        result = HostResult(state=self.state)
        prior = self._prior_resources(result.diagnostics)
        if result.diagnostics.has_error():
            return result
        planned = self._plan(prior, result)
        result.changes = [change for change, _ in planned]
        return result

    def apply(self) -> HostResult:
        result = HostResult(state=self.state)
        configs = self._decoded_configs(result.diagnostics)
        stored = self._prior_resources(result.diagnostics)
        if result.diagnostics.has_error():
            return result

        context = self._configure(result.diagnostics)
        if context is None:
            return result

        new_resources: Dict[str, Any] = {}
        try:
            prior = self._refresh(context, stored, result.diagnostics)
            planned = self._plan(prior, result, configs=configs)
            result.changes = [change for change, _ in planned]
            for change, values in planned:
                self._check_known(change, values, self._type_of(change.address, prior), result.diagnostics)
            if result.diagnostics.has_error():
                result.state = self._render_state(prior)
                return result

            for change, values in planned:
                type_name = self._type_of(change.address, prior)
                token = push_resource(change.address)
                try:
                    entry = self._execute(context, change, type_name, values, prior.get(change.address), result.diagnostics)
                finally:
                    reset_resource(token)
                if entry is not None:
                    new_resources[change.address] = entry
        finally:
            context.close()

        result.state = self._render_state(new_resources)
        return result

    def destroy(self) -> HostResult:
        result = HostResult(state=self.state)
        remaining = self._prior_resources(result.diagnostics)
        if result.diagnostics.has_error():
            return result

        context = self._configure(result.diagnostics)
        if context is None:
            return result

        try:
            for address in reversed(list(remaining)):
                type_name, values = remaining[address]
                token = push_resource(address)
                try:
                    resp = self._call(context, type_name, "delete", values, result.diagnostics, address)
                finally:
                    reset_resource(token)
                result.changes.append(ResourceChange(address=address, action="delete"))
                if resp is not None and resp.removed:
                    del remaining[address]
        finally:
            context.close()

        result.state = self._render_state(remaining)
        return result

    def import_resource(self, address: str, import_id: str) -> HostResult:
        """Adopt an existing openHAB object under ``address`` (``<type>.<name>``)."""
        result = HostResult(state=self.state)
        type_name, _, _ = address.partition(".")
        resource_class = ResourceRegistry.try_get(type_name)
        if resource_class is None:
            result.diagnostics.add_error("Invalid resource type", f"Resource type '{type_name}' of '{address}' is not supported.")
            return result

        resources = self._prior_resources(result.diagnostics)
        if result.diagnostics.has_error():
            return result

        context = self._configure(result.diagnostics)
        if context is None:
            return result

        token = push_resource(address)
        try:
            resource = resource_class(context)
            resp = ResourceResponse()
            resource.import_state(import_id, resp)
            if resp.state is not None:
                resource.read(resp.state, resp)
            result.diagnostics.extend(_scoped(resp.diagnostics, address))
            if resp.state is None:
                if not resp.diagnostics.has_error():
                    result.diagnostics.add_error(
                        "Cannot import non-existent remote object",
                        f"No openHAB object found for import id '{import_id}'.",
                    )
                return result
            resources[address] = (type_name, resp.state.to_values())
        finally:
            reset_resource(token)
            context.close()

        result.state = self._render_state(resources)
        return result

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _decode_resource(
        self,
        resource_cfg: ResourceConfig,
        diagnostics: Diagnostics,
    ) -> Optional[Dict[str, AttributeValue]]:
        resource_class = ResourceRegistry.try_get(resource_cfg.type)
        if resource_class is None:
            diagnostics.add_attribute_error(
                resource_cfg.address,
                "Invalid resource type",
                f"The provider does not support resource type '{resource_cfg.type}'.",
            )
            return None

        schema = resource_class.schema()
        values, decode_diags = decode_config(schema, resource_cfg.attributes)
        diagnostics.extend(_scoped(decode_diags, resource_cfg.address))
        if decode_diags.has_error():
            return None

        validate_diags = validate_config(schema, values)
        diagnostics.extend(_scoped(validate_diags, resource_cfg.address))
        if validate_diags.has_error():
            return None
        return values

    def _decoded_configs(self, diagnostics: Diagnostics) -> Dict[str, Tuple[str, Dict[str, AttributeValue]]]:
        configs = {}
        for resource_cfg in self.document.resources:
            values = self._decode_resource(resource_cfg, diagnostics)
            if values is not None:
                configs[resource_cfg.address] = (resource_cfg.type, values)
        return configs

    def _prior_resources(self, diagnostics: Diagnostics) -> Dict[str, Tuple[str, Dict[str, AttributeValue]]]:
        prior = {}
        for address, entry in self.state.get("resources", {}).items():
            type_name = entry["type"]
            resource_class = ResourceRegistry.try_get(type_name)
            if resource_class is None:
                diagnostics.add_attribute_error(
                    address,
                    "Invalid resource type",
                    f"State holds resource type '{type_name}', which the provider does not support.",
                )
                continue
            values, _ = decode_config(resource_class.schema(), entry.get("attributes", {}))
            prior[address] = (type_name, values)
        return prior

    def _configure(self, diagnostics: Diagnostics) -> Optional[ProviderContext]:
        context, diags = self.provider.configure(self.document.provider, http_client=self._http_client)
        diagnostics.extend(_scoped(diags, "provider"))
        return context

    def _refresh(
        self,
        context: ProviderContext,
        stored: Dict[str, Tuple[str, Dict[str, AttributeValue]]],
        diagnostics: Diagnostics,
    ) -> Dict[str, Tuple[str, Dict[str, AttributeValue]]]:
        refreshed = {}
        for address, (type_name, values) in stored.items():
            token = push_resource(address)
            try:
                resp = self._call(context, type_name, "read", values, diagnostics, address)
            finally:
                reset_resource(token)
            if resp is None or resp.diagnostics.has_error():
                refreshed[address] = (type_name, values)
            elif not resp.removed and resp.state is not None:
                refreshed[address] = (type_name, resp.state.to_values())
            else:
                logger.info(f"{address} no longer exists in openHAB")
        return refreshed

    def _plan(
        self,
        prior: Dict[str, Tuple[str, Dict[str, AttributeValue]]],
        result: HostResult,
        *,
        configs: Optional[Dict[str, Tuple[str, Dict[str, AttributeValue]]]] = None,
    ) -> List[Tuple[ResourceChange, Optional[Dict[str, AttributeValue]]]]:
        if configs is None:
            configs = self._decoded_configs(result.diagnostics)
            if result.diagnostics.has_error():
                return []

        planned = []
        # Resources gone from configuration are deleted first, newest first.
        for address in reversed(list(prior)):
            if address in configs:
                continue
            type_name, _ = prior[address]
            schema = ResourceRegistry.get(type_name).schema()
            change = plan_resource(schema, None, prior[address][1])
            planned.append((ResourceChange(address=address, action=change.action), None))

        for address, (type_name, values) in configs.items():
            schema = ResourceRegistry.get(type_name).schema()
            prior_values = prior[address][1] if address in prior else None
            if address in prior and prior[address][0] != type_name:
                result.diagnostics.add_attribute_error(
                    address,
                    "Resource type changed",
                    f"State holds a '{prior[address][0]}' at this address, configuration declares '{type_name}'.",
                )
                continue
            change = plan_resource(schema, values, prior_values)
            planned.append(
                (
                    ResourceChange(
                        address=address,
                        action=change.action,
                        changed_paths=change.changed_paths,
                        replace_paths=change.replace_paths,
                    ),
                    change.planned,
                )
            )
        return planned

    def _check_known(
        self,
        change: ResourceChange,
        planned: Optional[Dict[str, AttributeValue]],
        type_name: str,
        diagnostics: Diagnostics,
    ) -> None:
        # Only computed attributes may still be unknown once apply starts.
        if planned is None:
            return
        schema = ResourceRegistry.get(type_name).schema()
        for name, attr in schema.attributes.items():
            if not attr.computed and planned[name].is_unknown:
                diagnostics.add_attribute_error(
                    f"{change.address}.{name}",
                    "Value unknown at apply time",
                    f"The value of '{name}' is not known yet, so '{change.address}' cannot be applied.",
                )

    def _type_of(self, address: str, prior: Dict[str, Tuple[str, Dict[str, AttributeValue]]]) -> str:
        if address in prior:
            return prior[address][0]
        return address.partition(".")[0]

    def _call(
        self,
        context: ProviderContext,
        type_name: str,
        operation: str,
        values: Dict[str, AttributeValue],
        diagnostics: Diagnostics,
        address: str,
    ) -> Optional[ResourceResponse]:
        resource, diags = self.provider.new_resource(type_name, context)
        diagnostics.extend(_scoped(diags, address))
        if resource is None:
            return None

        resp = ResourceResponse()
        getattr(resource, operation)(resource.data_class.from_values(values), resp)
        diagnostics.extend(_scoped(resp.diagnostics, address))
        return resp

    def _execute(
        self,
        context: ProviderContext,
        change: ResourceChange,
        type_name: str,
        planned: Optional[Dict[str, AttributeValue]],
        prior: Optional[Tuple[str, Dict[str, AttributeValue]]],
        diagnostics: Diagnostics,
    ) -> Optional[Tuple[str, Dict[str, AttributeValue]]]:
        """Run one planned change; returns the resulting state entry, or None when the resource is gone."""
        prior_values = prior[1] if prior is not None else None

        if change.action == "noop":
            return prior

        if change.action == "delete":
            resp = self._call(context, type_name, "delete", prior_values, diagnostics, change.address)
            if resp is not None and resp.removed:
                return None
            return prior

        if change.action == "replace":
            logger.info(f"replacing {change.address}, caused by {', '.join(change.replace_paths)}")
            resp = self._call(context, type_name, "delete", prior_values, diagnostics, change.address)
            if resp is None or not resp.removed:
                return prior

        operation = "update" if change.action == "update" else "create"
        resp = self._call(context, type_name, operation, planned, diagnostics, change.address)
        if resp is not None and resp.state is not None:
            return type_name, resp.state.to_values()
        if change.action == "update":
            return prior
        return None

    def _render_state(self, resources: Dict[str, Tuple[str, Dict[str, AttributeValue]]]) -> Dict[str, Any]:
        return {
            "version": STATE_VERSION,
            "resources": {
                address: {"type": type_name, "attributes": encode_state(values)}
                for address, (type_name, values) in resources.items()
            },
        }

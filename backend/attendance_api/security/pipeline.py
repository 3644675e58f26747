"""Ordered gate pipelines built once from the immutable policies."""
from dataclasses import replace
from typing import Iterable, List

from flask import current_app, has_app_context

from attendance_api.policy import Policies
from attendance_api.security.gates import Gate, GateResult, NetworkContext, Verdict
from attendance_api.security import location_gates, network_gates, spoof_gates


class GatePipeline:
    """Runs gates in order, stopping at the first rejection or bypass."""

    def __init__(self, gates: Iterable[Gate], name: str = 'pipeline', success_tag: str = None):
        self.gates: List[Gate] = list(gates)
        self.name = name
        self.success_tag = success_tag

    def run(self, context: NetworkContext) -> GateResult:
        for gate in self.gates:
            result = gate.evaluate(context)
            if result.verdict is Verdict.REJECT:
                result = replace(result, gate=gate.name)
                self._log_rejection(context, result)
                return result
            if result.verdict is Verdict.BYPASS:
                return replace(result, gate=gate.name)
        return GateResult(Verdict.ACCEPT, tag=self.success_tag)

    def enforce(self, context: NetworkContext) -> GateResult:
        """Run the pipeline and raise the rejection as an API error."""
        result = self.run(context)
        if result.verdict is Verdict.REJECT:
            raise result.to_exception()
        return result

    def gate_names(self) -> List[str]:
        return [gate.name for gate in self.gates]

    def _log_rejection(self, context: NetworkContext, result: GateResult) -> None:
        if has_app_context():
            current_app.logger.warning(
                '%s rejected request to %s from %s at gate %s: %s',
                self.name, context.path, context.client_ip, result.gate, result.reason
            )

    def __len__(self) -> int:
        return len(self.gates)

    def __repr__(self) -> str:
        return f'<GatePipeline {self.name} {self.gate_names()}>'


def build_network_pipeline(policies: Policies) -> GatePipeline:
    """Network gate followed by the spoof detector.

    Toggled heuristics are left out of the list entirely when disabled.
    """
    network = policies.network
    spoof = policies.spoof

    gates: List[Gate] = [
        network_gates.PathExemptionGate(network.exempt_paths),
        network_gates.AdminOverrideGate(network.admin_override_key),
        network_gates.IPAllowListGate(network.ip_networks, network.ip_addresses),
    ]
    if network.enable_vpn_detection:
        gates.append(network_gates.VPNDetectionGate(
            network.vpn_headers, network.vpn_user_agent_keywords, network.vpn_min_ttl
        ))
    if network.enable_network_type_check:
        gates.append(network_gates.NetworkTypeGate(network.allowed_network_types))
    gates.append(network_gates.WiFiSSIDGate(network.allowed_ssids, network.ssid_patterns))
    gates.append(network_gates.CellularCarrierGate(
        network.allowed_carriers, network.secure_cellular_types
    ))

    if spoof.enable_precision_check:
        gates.append(spoof_gates.CoordinatePrecisionGate(spoof.max_coordinate_precision))
    if spoof.enable_repeating_zero_check:
        gates.append(spoof_gates.RepeatingZeroGate(spoof.max_coordinate_precision))
    if spoof.enable_mock_header_check:
        gates.append(spoof_gates.MockLocationHeaderGate(spoof.mock_location_headers))
    if spoof.enable_gps_accuracy_check:
        gates.append(spoof_gates.GPSAccuracyGate(spoof.min_gps_accuracy))

    return GatePipeline(gates, name='network', success_tag='validated')


def build_location_pipeline(policies: Policies) -> GatePipeline:
    """Geofence checks for check-in and check-out bodies."""
    gates = [
        location_gates.CoordinateRangeGate(),
        location_gates.CountryBoundsGate(
            policies.location.country_bounds, policies.location.country_name
        ),
        location_gates.SchoolRadiusGate(policies.school),
    ]
    return GatePipeline(gates, name='location')

"""Typed view of the cluster network configuration document."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from .errors import SpecError

NETWORK_TYPE_OPENSHIFT_SDN = "OpenShiftSDN"
NETWORK_TYPE_OVN_KUBERNETES = "OVNKubernetes"

SDN_MODE_SUBNET = "Subnet"
SDN_MODE_MULTITENANT = "Multitenant"
SDN_MODE_NETWORK_POLICY = "NetworkPolicy"
SDN_MODES = (SDN_MODE_NETWORK_POLICY, SDN_MODE_MULTITENANT, SDN_MODE_SUBNET)

# Each default network type owns exactly one payload key.
_VARIANT_KEYS = {
    NETWORK_TYPE_OPENSHIFT_SDN: "openshiftSDNConfig",
    NETWORK_TYPE_OVN_KUBERNETES: "ovnKubernetesConfig",
}


@dataclass
class ClusterNetwork:
    cidr: str
    host_subnet_length: int

    def to_dict(self) -> Dict[str, Any]:
        return {"cidr": self.cidr, "hostSubnetLength": self.host_subnet_length}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ClusterNetwork":
        if not isinstance(data, Mapping):
            raise SpecError("clusterNetworks entries must be mappings")
        missing = [key for key in ("cidr", "hostSubnetLength") if key not in data]
        if missing:
            raise SpecError(f"clusterNetworks entry missing required field(s): {', '.join(missing)}")
        return cls(
            cidr=str(data["cidr"]),
            host_subnet_length=_as_int(data["hostSubnetLength"], "hostSubnetLength"),
        )


@dataclass
class OpenShiftSDNConfig:
    mode: str = ""
    vxlan_port: Optional[int] = None
    mtu: Optional[int] = None
    use_external_openvswitch: Optional[bool] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"mode": self.mode}
        if self.vxlan_port is not None:
            data["vxlanPort"] = self.vxlan_port
        if self.mtu is not None:
            data["mtu"] = self.mtu
        if self.use_external_openvswitch is not None:
            data["useExternalOpenvswitch"] = self.use_external_openvswitch
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "OpenShiftSDNConfig":
        port = data.get("vxlanPort")
        mtu = data.get("mtu")
        external = data.get("useExternalOpenvswitch")
        return cls(
            mode=str(data.get("mode") or ""),
            vxlan_port=_as_int(port, "vxlanPort") if port is not None else None,
            mtu=_as_int(mtu, "mtu") if mtu is not None else None,
            use_external_openvswitch=_as_bool(external, "useExternalOpenvswitch") if external is not None else None,
        )


@dataclass
class ProxyConfig:
    bind_address: str = ""
    iptables_sync_period: str = ""
    proxy_arguments: Dict[str, List[str]] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        if self.bind_address:
            data["bindAddress"] = self.bind_address
        if self.iptables_sync_period:
            data["iptablesSyncPeriod"] = self.iptables_sync_period
        if self.proxy_arguments:
            data["proxyArguments"] = {key: list(values) for key, values in self.proxy_arguments.items()}
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ProxyConfig":
        raw_args = data.get("proxyArguments") or {}
        if not isinstance(raw_args, Mapping):
            raise SpecError("kubeProxyConfig.proxyArguments must be a mapping")
        arguments: Dict[str, List[str]] = {}
        for key, values in raw_args.items():
            if values is None:
                values = []
            if not isinstance(values, list):
                raise SpecError(f"proxy argument {key} must be a list of strings")
            arguments[str(key)] = [str(value) for value in values]
        return cls(
            bind_address=str(data.get("bindAddress") or ""),
            iptables_sync_period=str(data.get("iptablesSyncPeriod") or ""),
            proxy_arguments=arguments,
        )


@dataclass
class DefaultNetworkDefinition:
    type: str
    openshift_sdn_config: Optional[OpenShiftSDNConfig] = None
    ovn_kubernetes_config: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"type": self.type}
        if self.openshift_sdn_config is not None:
            data["openshiftSDNConfig"] = self.openshift_sdn_config.to_dict()
        if self.ovn_kubernetes_config is not None:
            data["ovnKubernetesConfig"] = dict(self.ovn_kubernetes_config)
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "DefaultNetworkDefinition":
        network_type = data.get("type")
        if not isinstance(network_type, str) or network_type not in _VARIANT_KEYS:
            raise SpecError(f"unknown default network type {network_type!r}")
        for other_type, key in _VARIANT_KEYS.items():
            if other_type != network_type and data.get(key) is not None:
                raise SpecError(f"{key} cannot be set when the default network type is {network_type}")

        sdn = data.get("openshiftSDNConfig")
        ovn = data.get("ovnKubernetesConfig")
        if sdn is not None and not isinstance(sdn, Mapping):
            raise SpecError("openshiftSDNConfig must be a mapping")
        if ovn is not None and not isinstance(ovn, Mapping):
            raise SpecError("ovnKubernetesConfig must be a mapping")
        return cls(
            type=network_type,
            openshift_sdn_config=OpenShiftSDNConfig.from_dict(sdn) if sdn is not None else None,
            ovn_kubernetes_config=dict(ovn) if ovn is not None else None,
        )


@dataclass
class NetworkConfigSpec:
    service_network: str
    cluster_networks: List[ClusterNetwork]
    default_network: DefaultNetworkDefinition
    deploy_kube_proxy: Optional[bool] = None
    kube_proxy_config: Optional[ProxyConfig] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "serviceNetwork": self.service_network,
            "clusterNetworks": [network.to_dict() for network in self.cluster_networks],
            "defaultNetwork": self.default_network.to_dict(),
        }
        if self.deploy_kube_proxy is not None:
            data["deployKubeProxy"] = self.deploy_kube_proxy
        if self.kube_proxy_config is not None:
            data["kubeProxyConfig"] = self.kube_proxy_config.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "NetworkConfigSpec":
        """Decode a spec mapping, accepting either the bare spec or a wrapping object with ``spec``."""

        if not isinstance(data, Mapping):
            raise SpecError("network spec must be a mapping")
        if isinstance(data.get("spec"), Mapping):
            data = data["spec"]

        default_network = data.get("defaultNetwork")
        if not isinstance(default_network, Mapping):
            raise SpecError("defaultNetwork is required")
        raw_networks = data.get("clusterNetworks") or []
        if not isinstance(raw_networks, list):
            raise SpecError("clusterNetworks must be a list")
        proxy = data.get("kubeProxyConfig")
        if proxy is not None and not isinstance(proxy, Mapping):
            raise SpecError("kubeProxyConfig must be a mapping")
        deploy = data.get("deployKubeProxy")

        return cls(
            service_network=str(data.get("serviceNetwork") or ""),
            cluster_networks=[ClusterNetwork.from_dict(entry) for entry in raw_networks],
            default_network=DefaultNetworkDefinition.from_dict(default_network),
            deploy_kube_proxy=_as_bool(deploy, "deployKubeProxy") if deploy is not None else None,
            kube_proxy_config=ProxyConfig.from_dict(proxy) if proxy is not None else None,
        )


def _as_int(value: Any, name: str) -> int:
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, bool) or not isinstance(value, int):
        raise SpecError(f"{name} must be an integer")
    if value < 0:
        raise SpecError(f"{name} must not be negative")
    return value


def _as_bool(value: Any, name: str) -> bool:
    if not isinstance(value, bool):
        raise SpecError(f"{name} must be true or false")
    return value


__all__ = [
    "ClusterNetwork",
    "DefaultNetworkDefinition",
    "NetworkConfigSpec",
    "OpenShiftSDNConfig",
    "ProxyConfig",
    "NETWORK_TYPE_OPENSHIFT_SDN",
    "NETWORK_TYPE_OVN_KUBERNETES",
    "SDN_MODES",
    "SDN_MODE_MULTITENANT",
    "SDN_MODE_NETWORK_POLICY",
    "SDN_MODE_SUBNET",
]

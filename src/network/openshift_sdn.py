"""openshift-sdn: defaults, validation, rendering and change safety."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import jsonpatch
import yaml

from src.common.objects import format_id, kubernetes_id, nested_get
from src.render import RenderData, RenderError, render_dir

from .config import RenderOptions
from .types import (
    NETWORK_TYPE_OPENSHIFT_SDN,
    SDN_MODE_MULTITENANT,
    SDN_MODE_NETWORK_POLICY,
    SDN_MODE_SUBNET,
    NetworkConfigSpec,
    OpenShiftSDNConfig,
    ProxyConfig,
)

logger = logging.getLogger(__name__)

DEFAULT_VXLAN_PORT = 4789
# VXLAN header plus the outer UDP and IP headers.
VXLAN_OVERHEAD = 50
MAX_MTU = 65536
MAX_PORT = 65535

DEFAULT_BIND_ADDRESS = "0.0.0.0"
METRICS_ARGUMENT = "metrics-bind-address"
DEFAULT_METRICS_BIND_ADDRESS = "0.0.0.0:9101"
PROXY_SERVING_PORT = 10251

NAMESPACE = "openshift-sdn"
MASTER_NODE_LABEL = "node-role.kubernetes.io/master"
SDN_TEMPLATE_DIR = Path("network") / "openshift-sdn"
OVS_TEMPLATE_DIR = Path("network") / "openshift-sdn-ovs"

_PLUGIN_NAMES = {
    SDN_MODE_SUBNET: "redhat/openshift-ovs-subnet",
    SDN_MODE_MULTITENANT: "redhat/openshift-ovs-multitenant",
    SDN_MODE_NETWORK_POLICY: "redhat/openshift-ovs-networkpolicy",
}


def sdn_plugin_name(mode: str) -> str:
    """Return the legacy plugin name for ``mode``, or ``""`` when the mode is unknown."""

    return _PLUGIN_NAMES.get(mode, "")


def fill_openshift_sdn_defaults(
    conf: NetworkConfigSpec,
    previous: Optional[NetworkConfigSpec],
    host_mtu: int,
) -> NetworkConfigSpec:
    """Fill every unset openshift-sdn field of ``conf`` in place.

    Values already set by the caller are never overwritten. The MTU default is
    derived from ``host_mtu`` unless ``previous`` already carried one, in which
    case that value is kept so a changed host hint cannot alter a live overlay.
    """

    sc = conf.default_network.openshift_sdn_config
    if sc is None:
        sc = OpenShiftSDNConfig(mode=SDN_MODE_NETWORK_POLICY)
        conf.default_network.openshift_sdn_config = sc
    if not sc.mode:
        sc.mode = SDN_MODE_NETWORK_POLICY

    if sc.vxlan_port is None:
        sc.vxlan_port = DEFAULT_VXLAN_PORT

    if sc.mtu is None:
        previous_mtu = _previous_mtu(previous)
        sc.mtu = previous_mtu if previous_mtu is not None else host_mtu - VXLAN_OVERHEAD

    if conf.deploy_kube_proxy is None:
        conf.deploy_kube_proxy = False

    if conf.kube_proxy_config is None:
        conf.kube_proxy_config = ProxyConfig()
    proxy = conf.kube_proxy_config
    if not proxy.bind_address:
        proxy.bind_address = DEFAULT_BIND_ADDRESS
    if not proxy.proxy_arguments:
        proxy.proxy_arguments = {METRICS_ARGUMENT: [DEFAULT_METRICS_BIND_ADDRESS]}
    return conf


def _previous_mtu(previous: Optional[NetworkConfigSpec]) -> Optional[int]:
    if previous is None or previous.default_network.type != NETWORK_TYPE_OPENSHIFT_SDN:
        return None
    sc = previous.default_network.openshift_sdn_config
    return sc.mtu if sc is not None else None


def validate_openshift_sdn(conf: NetworkConfigSpec) -> List[str]:
    errors: List[str] = []
    if not conf.cluster_networks:
        errors.append("ClusterNetworks cannot be empty")

    sc = conf.default_network.openshift_sdn_config
    if sc is None:
        return errors
    if sc.mtu is not None and sc.mtu > MAX_MTU:
        errors.append(f"invalid MTU {sc.mtu}")
    if not sdn_plugin_name(sc.mode):
        errors.append(f'invalid openshift-sdn mode "{sc.mode}"')
    if sc.vxlan_port is not None and sc.vxlan_port > MAX_PORT:
        errors.append(f"invalid VXLANPort {sc.vxlan_port}")
    return errors


def is_openshift_sdn_change_safe(prev: NetworkConfigSpec, next_conf: NetworkConfigSpec) -> List[str]:
    """Any change to the openshift-sdn block is refused once deployed; reported as one error."""

    prev_block = _sdn_block(prev)
    next_block = _sdn_block(next_conf)
    patch = jsonpatch.make_patch(prev_block, next_block)
    if not patch.patch:
        return []
    changed = sorted({op["path"] for op in patch.patch})
    logger.info("openshift-sdn configuration changed at %s", ", ".join(changed))
    return ["cannot change openshift-sdn configuration"]


def _sdn_block(conf: NetworkConfigSpec) -> Dict[str, Any]:
    sc = conf.default_network.openshift_sdn_config
    return sc.to_dict() if sc is not None else {}


def render_openshift_sdn(
    conf: NetworkConfigSpec,
    manifest_dir: Path,
    options: Optional[RenderOptions] = None,
) -> List[Dict[str, Any]]:
    """Render the openshift-sdn manifests for a defaulted, validated spec."""

    sc = conf.default_network.openshift_sdn_config
    if sc is None:
        raise ValueError("openshift-sdn configuration must be defaulted before rendering")
    options = options or RenderOptions()
    manifest_dir = Path(manifest_dir)

    install_ovs = not sc.use_external_openvswitch
    data = RenderData()
    data.data["Namespace"] = NAMESPACE
    data.data["NodeImage"] = options.node_image
    data.data["HypershiftImage"] = options.hypershift_image
    data.data["KubernetesServiceHost"] = options.api_server_host
    data.data["KubernetesServicePort"] = options.api_server_port
    data.data["NodeConfig"] = node_config(conf)
    data.data["ControllerConfig"] = controller_config(conf)

    objects = render_dir(manifest_dir / SDN_TEMPLATE_DIR, data)
    if install_ovs:
        objects.extend(render_dir(manifest_dir / OVS_TEMPLATE_DIR, data))
    else:
        logger.info("useExternalOpenvswitch set; not rendering the ovs daemonset")

    _check_rendered(objects)
    return objects


def _check_rendered(objects: List[Dict[str, Any]]) -> None:
    if not objects or kubernetes_id(objects[0])[0] != "Namespace":
        raise RenderError("the first rendered object must be the Namespace")

    seen = set()
    for obj in objects:
        identity = kubernetes_id(obj)
        if identity in seen:
            raise RenderError(f"duplicate rendered object {format_id(obj)}")
        seen.add(identity)

        if identity[0] != "Deployment":
            continue
        selector = nested_get(obj, "spec", "template", "spec", "nodeSelector")
        if not isinstance(selector, dict) or MASTER_NODE_LABEL not in selector:
            raise RenderError(f"{format_id(obj)} must select {MASTER_NODE_LABEL} nodes")


def node_config(conf: NetworkConfigSpec) -> str:
    """Build the node agent's NodeConfig document as YAML text."""

    sc = conf.default_network.openshift_sdn_config
    proxy = conf.kube_proxy_config or ProxyConfig()
    document = {
        "apiVersion": "v1",
        "kind": "NodeConfig",
        "servingInfo": {
            "bindAddress": f"{proxy.bind_address}:{PROXY_SERVING_PORT}",
            "certFile": "/etc/origin/node/server.crt",
            "keyFile": "/etc/origin/node/server.key",
            "clientCA": "/etc/origin/node/client-ca.crt",
        },
        "iptablesSyncPeriod": proxy.iptables_sync_period or "",
        "proxyArguments": {key: list(values) for key, values in proxy.proxy_arguments.items()},
        "kubeletArguments": {
            "container-runtime": ["remote"],
            "container-runtime-endpoint": ["/var/run/crio/crio.sock"],
        },
        "networkConfig": {
            "networkPluginName": sdn_plugin_name(sc.mode),
            "mtu": sc.mtu,
        },
        "enableUnidling": True,
        "dnsBindAddress": "0.0.0.0:53",
    }
    return yaml.safe_dump(document, sort_keys=False)


def controller_config(conf: NetworkConfigSpec) -> str:
    """Build the network controller's configuration document as YAML text."""

    sc = conf.default_network.openshift_sdn_config
    document = {
        "apiVersion": "openshiftcontrolplane.config.openshift.io/v1",
        "kind": "OpenShiftControllerManagerConfig",
        "kubeClientConfig": {
            "kubeConfig": "",
            "connectionOverrides": {"qps": 50, "burst": 100},
        },
        "servingInfo": {"bindAddress": "0.0.0.0:8443"},
        "network": {
            "networkPluginName": sdn_plugin_name(sc.mode),
            "clusterNetworks": [network.to_dict() for network in conf.cluster_networks],
            "serviceNetworkCIDR": conf.service_network,
            "vxlanPort": sc.vxlan_port,
        },
    }
    return yaml.safe_dump(document, sort_keys=False)


__all__ = [
    "controller_config",
    "fill_openshift_sdn_defaults",
    "is_openshift_sdn_change_safe",
    "node_config",
    "render_openshift_sdn",
    "sdn_plugin_name",
    "validate_openshift_sdn",
]

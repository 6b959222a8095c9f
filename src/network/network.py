from __future__ import annotations

import ipaddress
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .config import DEFAULT_HOST_MTU, RenderOptions
from .openshift_sdn import (
    fill_openshift_sdn_defaults,
    is_openshift_sdn_change_safe,
    render_openshift_sdn,
    validate_openshift_sdn,
)
from .types import NETWORK_TYPE_OPENSHIFT_SDN, NetworkConfigSpec

IPNetwork = Union[ipaddress.IPv4Network, ipaddress.IPv6Network]


def fill_defaults(
    conf: NetworkConfigSpec,
    previous: Optional[NetworkConfigSpec] = None,
    host_mtu: int = DEFAULT_HOST_MTU,
) -> NetworkConfigSpec:
    if conf.default_network.type == NETWORK_TYPE_OPENSHIFT_SDN:
        fill_openshift_sdn_defaults(conf, previous, host_mtu)
    return conf


def validate(conf: NetworkConfigSpec) -> List[str]:
    """Return every problem with a defaulted spec; an empty list means it is valid."""

    errors = _validate_ip_pools(conf)
    errors.extend(_validate_kube_proxy(conf))
    if conf.default_network.type == NETWORK_TYPE_OPENSHIFT_SDN:
        errors.extend(validate_openshift_sdn(conf))
    else:
        errors.append(f'unsupported default network type "{conf.default_network.type}"')
    return errors


def _validate_ip_pools(conf: NetworkConfigSpec) -> List[str]:
    errors: List[str] = []
    pools: List[IPNetwork] = []

    try:
        pools.append(ipaddress.ip_network(conf.service_network))
    except ValueError:
        errors.append(f"invalid ServiceNetwork {conf.service_network}")

    for entry in conf.cluster_networks:
        try:
            network = ipaddress.ip_network(entry.cidr)
        except ValueError:
            errors.append(f"invalid ClusterNetwork CIDR {entry.cidr}")
            continue
        host_bits = network.max_prefixlen - network.prefixlen
        if not 0 < entry.host_subnet_length <= host_bits:
            errors.append(
                f"invalid HostSubnetLength {entry.host_subnet_length} for ClusterNetwork {entry.cidr}"
            )
        for other in pools:
            if other.version == network.version and other.overlaps(network):
                errors.append(f"ClusterNetwork {entry.cidr} overlaps with {other}")
        pools.append(network)
    return errors


def _validate_kube_proxy(conf: NetworkConfigSpec) -> List[str]:
    proxy = conf.kube_proxy_config
    if proxy is None or not proxy.bind_address:
        return []
    try:
        ipaddress.ip_address(proxy.bind_address)
    except ValueError:
        return [f"invalid kube-proxy BindAddress {proxy.bind_address}"]
    return []


def is_change_safe(prev: NetworkConfigSpec, next_conf: NetworkConfigSpec) -> List[str]:
    """Compare two defaulted specs and list the changes a running cluster cannot take."""

    errors: List[str] = []
    if prev.service_network != next_conf.service_network:
        errors.append("cannot change ServiceNetwork")
    if prev.cluster_networks != next_conf.cluster_networks:
        errors.append("cannot change ClusterNetworks")
    if prev.default_network.type != next_conf.default_network.type:
        errors.append("cannot change default network type")
        return errors
    if next_conf.default_network.type == NETWORK_TYPE_OPENSHIFT_SDN:
        errors.extend(is_openshift_sdn_change_safe(prev, next_conf))
    return errors


def render(
    conf: NetworkConfigSpec,
    manifest_dir: Path,
    options: Optional[RenderOptions] = None,
) -> List[Dict[str, Any]]:
    if conf.default_network.type != NETWORK_TYPE_OPENSHIFT_SDN:
        raise ValueError(f'unsupported default network type "{conf.default_network.type}"')
    return render_openshift_sdn(conf, manifest_dir, options)


__all__ = ["fill_defaults", "validate", "is_change_safe", "render"]

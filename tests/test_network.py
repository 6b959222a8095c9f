import copy
import unittest
from pathlib import Path

from src.network.config import RenderOptions
from src.network.errors import ConfigInvalidError, UnsafeChangeError
from src.network.network import fill_defaults, is_change_safe, render, validate
from src.network.pipeline import prepare
from src.network.types import (
    ClusterNetwork,
    DefaultNetworkDefinition,
    NetworkConfigSpec,
    OpenShiftSDNConfig,
    ProxyConfig,
)

MANIFEST_DIR = Path(__file__).resolve().parents[1] / "bindata"
OPTIONS = RenderOptions()


def sdn_spec() -> NetworkConfigSpec:
    return NetworkConfigSpec(
        service_network="172.30.0.0/16",
        cluster_networks=[
            ClusterNetwork(cidr="10.128.0.0/15", host_subnet_length=9),
            ClusterNetwork(cidr="10.0.0.0/14", host_subnet_length=8),
        ],
        default_network=DefaultNetworkDefinition(
            type="OpenShiftSDN",
            openshift_sdn_config=OpenShiftSDNConfig(mode="NetworkPolicy"),
        ),
    )


class FillDefaultsTests(unittest.TestCase):
    def test_uses_standard_host_mtu(self) -> None:
        conf = fill_defaults(sdn_spec())
        self.assertEqual(conf.default_network.openshift_sdn_config.mtu, 1450)

    def test_other_network_types_untouched(self) -> None:
        conf = sdn_spec()
        conf.default_network = DefaultNetworkDefinition(type="OVNKubernetes", ovn_kubernetes_config={})
        before = copy.deepcopy(conf)
        self.assertEqual(fill_defaults(conf), before)


class ValidateTests(unittest.TestCase):
    def test_defaulted_spec_is_valid(self) -> None:
        self.assertEqual(validate(fill_defaults(sdn_spec())), [])

    def test_ip_pool_problems(self) -> None:
        conf = fill_defaults(sdn_spec())
        conf.service_network = "not-a-cidr"
        conf.cluster_networks = [
            ClusterNetwork(cidr="10.128.0.0/14", host_subnet_length=9),
            ClusterNetwork(cidr="10.130.0.0/16", host_subnet_length=8),
            ClusterNetwork(cidr="10.0.0.0/30", host_subnet_length=9),
            ClusterNetwork(cidr="bogus", host_subnet_length=9),
        ]
        errors = validate(conf)
        self.assertIn("invalid ServiceNetwork not-a-cidr", errors)
        self.assertIn("ClusterNetwork 10.130.0.0/16 overlaps with 10.128.0.0/14", errors)
        self.assertIn("invalid HostSubnetLength 9 for ClusterNetwork 10.0.0.0/30", errors)
        self.assertIn("invalid ClusterNetwork CIDR bogus", errors)

    def test_service_network_overlap(self) -> None:
        conf = fill_defaults(sdn_spec())
        conf.service_network = "10.128.0.0/16"
        self.assertIn("ClusterNetwork 10.128.0.0/15 overlaps with 10.128.0.0/16", validate(conf))

    def test_reports_all_problems_at_once(self) -> None:
        conf = fill_defaults(sdn_spec())
        conf.cluster_networks = []
        conf.default_network.openshift_sdn_config.mtu = 70000
        conf.default_network.openshift_sdn_config.vxlan_port = 70000
        conf.kube_proxy_config = ProxyConfig(bind_address="localhost")
        errors = validate(conf)
        self.assertEqual(
            errors,
            [
                "invalid kube-proxy BindAddress localhost",
                "ClusterNetworks cannot be empty",
                "invalid MTU 70000",
                "invalid VXLANPort 70000",
            ],
        )

    def test_unsupported_network_type(self) -> None:
        conf = sdn_spec()
        conf.default_network = DefaultNetworkDefinition(type="OVNKubernetes", ovn_kubernetes_config={})
        self.assertIn('unsupported default network type "OVNKubernetes"', validate(conf))


class IsChangeSafeTests(unittest.TestCase):
    def test_no_change(self) -> None:
        self.assertEqual(is_change_safe(fill_defaults(sdn_spec()), fill_defaults(sdn_spec())), [])

    def test_pool_changes_are_refused(self) -> None:
        prev = fill_defaults(sdn_spec())
        next_conf = fill_defaults(sdn_spec())
        next_conf.service_network = "172.31.0.0/16"
        next_conf.cluster_networks.append(ClusterNetwork(cidr="10.8.0.0/14", host_subnet_length=8))
        next_conf.default_network.openshift_sdn_config.mtu = 1300
        self.assertEqual(
            is_change_safe(prev, next_conf),
            [
                "cannot change ServiceNetwork",
                "cannot change ClusterNetworks",
                "cannot change openshift-sdn configuration",
            ],
        )

    def test_type_change_is_refused(self) -> None:
        prev = fill_defaults(sdn_spec())
        next_conf = fill_defaults(sdn_spec())
        next_conf.default_network = DefaultNetworkDefinition(type="OVNKubernetes", ovn_kubernetes_config={})
        self.assertEqual(is_change_safe(prev, next_conf), ["cannot change default network type"])

    def test_proxy_change_is_allowed(self) -> None:
        prev = fill_defaults(sdn_spec())
        next_conf = fill_defaults(sdn_spec())
        next_conf.kube_proxy_config.iptables_sync_period = "1m"
        self.assertEqual(is_change_safe(prev, next_conf), [])


class RenderTests(unittest.TestCase):
    def test_namespace_first(self) -> None:
        objs = render(fill_defaults(sdn_spec()), MANIFEST_DIR, OPTIONS)
        self.assertEqual(objs[0]["kind"], "Namespace")

    def test_unsupported_type_raises(self) -> None:
        conf = sdn_spec()
        conf.default_network = DefaultNetworkDefinition(type="OVNKubernetes")
        with self.assertRaises(ValueError):
            render(conf, MANIFEST_DIR, OPTIONS)


class PrepareTests(unittest.TestCase):
    def test_first_pass(self) -> None:
        raw = sdn_spec()
        prepared = prepare(raw, MANIFEST_DIR, host_mtu=9000, options=OPTIONS)
        self.assertEqual(prepared.spec.default_network.openshift_sdn_config.mtu, 8950)
        self.assertIsNone(raw.default_network.openshift_sdn_config.mtu)
        self.assertEqual(prepared.objects[0]["kind"], "Namespace")

    def test_steady_state_pass(self) -> None:
        first = prepare(sdn_spec(), MANIFEST_DIR, host_mtu=9000, options=OPTIONS)
        second = prepare(sdn_spec(), MANIFEST_DIR, previous=first.spec, host_mtu=1500, options=OPTIONS)
        self.assertEqual(second.spec, first.spec)
        self.assertEqual(second.objects, first.objects)

    def test_invalid_config_raises_with_every_error(self) -> None:
        raw = sdn_spec()
        raw.cluster_networks = []
        raw.default_network.openshift_sdn_config.mode = "broken"
        with self.assertRaises(ConfigInvalidError) as ctx:
            prepare(raw, MANIFEST_DIR, options=OPTIONS)
        self.assertEqual(
            ctx.exception.errors,
            ["ClusterNetworks cannot be empty", 'invalid openshift-sdn mode "broken"'],
        )

    def test_unsafe_change_raises(self) -> None:
        first = prepare(sdn_spec(), MANIFEST_DIR, options=OPTIONS)
        raw = sdn_spec()
        raw.default_network.openshift_sdn_config.vxlan_port = 4790
        with self.assertRaises(UnsafeChangeError) as ctx:
            prepare(raw, MANIFEST_DIR, previous=first.spec, options=OPTIONS)
        self.assertEqual(ctx.exception.errors, ["cannot change openshift-sdn configuration"])


if __name__ == "__main__":  # pragma: no cover
    unittest.main()

"""``photon cluster``: container clusters running inside a project."""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Mapping, Sequence
from typing import Any

from photon_cli.cli import exit_codes
from photon_cli.cli.commands.base import add_noun, add_verb, cancelled, render_vms
from photon_cli.cli.console import out
from photon_cli.cli.context import CommandContext
from photon_cli.cli.output import OutputFormat
from photon_cli.core.models import VM, Cluster
from photon_cli.core.specs import ClusterCreateSpec
from photon_cli.exceptions import ValidationError

logger = logging.getLogger(__name__)

CLUSTER_TYPES: tuple[str, ...] = ("KUBERNETES", "MESOS", "SWARM", "HARBOR")

# (flag attribute, extended property key, prompt)
NETWORK_PROPERTIES: tuple[tuple[str, str, str], ...] = (
    ("dns", "dns", "VM network DNS server IP: "),
    ("gateway", "gateway", "VM network gateway IP: "),
    ("netmask", "netmask", "VM network netmask: "),
)
OPTIONAL_PROPERTIES: tuple[tuple[str, str, str], ...] = (
    ("master_ip", "master_ip", "Master IP address: "),
    ("container_network", "container_network", "Container network (in CIDR notation): "),
    ("etcd1", "etcd_ip1", "etcd server 1 IP address: "),
    ("etcd2", "etcd_ip2", "etcd server 2 IP address (leave blank for none): "),
    ("etcd3", "etcd_ip3", "etcd server 3 IP address (leave blank for none): "),
    ("ssh_key", "ssh_key", "Path to an SSH public key (leave blank for none): "),
)

MASTER_TAG_SUFFIX: str = ":master"


def _parse_count(raw: str, what: str, *, minimum: int) -> int:
    try:
        value = int(raw)
    except ValueError as exc:
        raise ValidationError(f"Invalid {what} '{raw}'.") from exc
    if value < minimum:
        raise ValidationError(f"{what.capitalize()} must be at least {minimum}.")
    return value


def _read_ssh_key(path: str) -> str:
    try:
        with open(path, encoding="utf-8") as handle:
            return handle.read().strip()
    except OSError as exc:
        raise ValidationError(f"Cannot read SSH key '{path}': {exc}") from exc


def build_create_spec(ctx: CommandContext) -> ClusterCreateSpec:
    """Fill a :class:`ClusterCreateSpec` from flags, prompting for gaps."""
    args = ctx.args
    name = ctx.require(ctx.ask("Cluster name: ", args.name), "a cluster name")
    cluster_type = ctx.ask("Cluster type (KUBERNETES, MESOS, SWARM or HARBOR): ", args.type).upper()
    if cluster_type not in CLUSTER_TYPES:
        raise ValidationError(
            f"Invalid cluster type '{cluster_type}'.",
            hint=f"Use one of: {', '.join(CLUSTER_TYPES)}",
        )
    worker_count = _parse_count(
        ctx.require(ctx.ask("Worker count: ", args.worker_count), "a worker count"),
        "worker count",
        minimum=1,
    )
    batch_size = _parse_count(args.batch_size or "0", "batch size", minimum=0)

    properties: dict[str, str] = {}
    for attr, key, prompt in NETWORK_PROPERTIES:
        properties[key] = ctx.require(ctx.ask(prompt, getattr(args, attr)), f"a value for --{attr}")
    for attr, key, prompt in OPTIONAL_PROPERTIES:
        value = ctx.ask(prompt, getattr(args, attr))
        if value:
            properties[key] = _read_ssh_key(value) if key == "ssh_key" else value

    return ClusterCreateSpec(
        name=name,
        type=cluster_type,
        worker_count=worker_count,
        vm_flavor=args.vm_flavor,
        disk_flavor=args.disk_flavor,
        network_id=args.network_id,
        batch_size=batch_size,
        extended_properties=properties,
    )


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------

def create_cluster(ctx: CommandContext) -> int:
    ctx.check_arg_count(0)
    spec = build_create_spec(ctx)
    project = ctx.resolve_project(ctx.args.tenant, ctx.args.project)
    logger.info("creating %s cluster %s in project %s", spec.type, spec.name, project.id)

    client = ctx.client
    ctx.wait_and_show(client.clusters.create(project.id, spec), client.clusters.get)
    return exit_codes.SUCCESS


def delete_cluster(ctx: CommandContext) -> int:
    (cluster_id,) = ctx.check_arg_count(1)
    if not ctx.confirmed(f"Delete cluster {cluster_id}?"):
        return cancelled()
    ctx.wait_for_task(ctx.client.clusters.delete(cluster_id))
    return exit_codes.SUCCESS


def master_ips(ctx: CommandContext, cluster_id: str, vms: Sequence[VM]) -> list[str]:
    """Resolve the IP addresses of the cluster's master VMs."""
    tag = f"cluster:{cluster_id}{MASTER_TAG_SUFFIX}"
    addresses: list[str] = []
    for vm in vms:
        if tag not in vm.tags:
            continue
        task = ctx.poll(ctx.client.vms.get_networks(vm.id).id)
        addresses.extend(_connected_ips(task.resource_properties))
    return addresses


def _connected_ips(properties: Mapping[str, Any] | None) -> list[str]:
    if not properties:
        return []
    connections = properties.get("networkConnections") or []
    return [
        str(conn["ipAddress"])
        for conn in connections
        if isinstance(conn, dict) and conn.get("network") and conn.get("ipAddress")
    ]


def show_cluster(ctx: CommandContext) -> int:
    (cluster_id,) = ctx.check_arg_count(1)
    client = ctx.client
    cluster: Cluster = client.clusters.get(cluster_id)
    vms = ctx.collect(client.clusters.list_vms(cluster_id), client.vms.pages)
    masters = master_ips(ctx, cluster.id, vms)

    if ctx.formatter.structured:
        ctx.formatter.document({"cluster": cluster, "master_ips": masters, "vms": vms})
        return exit_codes.SUCCESS

    pairs: list[tuple[str, object]] = [
        ("Name", cluster.name),
        ("State", cluster.state),
        ("Type", cluster.type),
        ("Worker count", cluster.worker_count),
        ("Master IPs", masters),
    ]
    pairs.extend((f"Property {k}", v) for k, v in sorted(cluster.extended_properties.items()))
    ctx.formatter.emit_one(
        cluster,
        f"Cluster ID: {cluster.id}",
        pairs,
        (cluster.id, cluster.name, cluster.state, cluster.type, cluster.worker_count, masters),
    )
    if ctx.formatter.format is OutputFormat.TABLE:
        out.write("\n")
        render_vms(ctx, vms)
    return exit_codes.SUCCESS


def list_clusters(ctx: CommandContext) -> int:
    ctx.check_arg_count(0)
    project = ctx.resolve_project(ctx.args.tenant, ctx.args.project)
    client = ctx.client
    clusters = ctx.collect(client.clusters.list_for_project(project.id), client.clusters.pages)

    if ctx.args.summary and ctx.formatter.format is OutputFormat.TABLE:
        counts = Counter(c.state for c in clusters)
        for state, count in sorted(counts.items()):
            out.write(f"{state}: {count}\n")
        out.write(f"\nTotal: {len(clusters)}\n")
        return exit_codes.SUCCESS

    ctx.formatter.emit_list(
        clusters,
        ("ID", "Name", "Type", "State", "Worker Count"),
        lambda c: (c.id, c.name, c.type, c.state, c.worker_count),
    )
    return exit_codes.SUCCESS


def list_cluster_vms(ctx: CommandContext) -> int:
    (cluster_id,) = ctx.check_arg_count(1)
    client = ctx.client
    return render_vms(ctx, ctx.collect(client.clusters.list_vms(cluster_id), client.vms.pages))


def resize_cluster(ctx: CommandContext) -> int:
    cluster_id, raw_count = ctx.check_arg_count(2)
    worker_count = _parse_count(raw_count, "worker count", minimum=1)
    if not ctx.confirmed(f"Resize cluster {cluster_id} to {worker_count} worker(s)?"):
        return cancelled()
    client = ctx.client
    ctx.wait_and_show(client.clusters.resize(cluster_id, worker_count), client.clusters.get)
    return exit_codes.SUCCESS


def register(subparsers: Any) -> None:
    verbs = add_noun(subparsers, "cluster", "Options for clusters")

    parser = add_verb(verbs, "create", create_cluster, "Create a new cluster")
    parser.add_argument("--tenant", default="", help="Tenant name (defaults to the selected tenant)")
    parser.add_argument("--project", default="", help="Project name (defaults to the selected project)")
    parser.add_argument("-n", "--name", default="", help="Cluster name")
    parser.add_argument("-k", "--type", default="", help="KUBERNETES, MESOS, SWARM or HARBOR")
    parser.add_argument("-v", "--vm_flavor", dest="vm_flavor", default="", help="VM flavor name")
    parser.add_argument("-d", "--disk_flavor", dest="disk_flavor", default="", help="Disk flavor name")
    parser.add_argument("-w", "--network_id", dest="network_id", default="", help="VM network id")
    parser.add_argument("-c", "--worker_count", dest="worker_count", default="", help="Worker count")
    parser.add_argument("--batch-size", default="", help="Worker batch expansion size")
    parser.add_argument("--dns", default="", help="VM network DNS server IP")
    parser.add_argument("--gateway", default="", help="VM network gateway IP")
    parser.add_argument("--netmask", default="", help="VM network netmask")
    parser.add_argument("--master-ip", default="", help="Master IP address")
    parser.add_argument("--container-network", default="", help="Container network CIDR")
    parser.add_argument("--etcd1", default="", help="etcd server 1 IP address")
    parser.add_argument("--etcd2", default="", help="etcd server 2 IP address")
    parser.add_argument("--etcd3", default="", help="etcd server 3 IP address")
    parser.add_argument("--ssh-key", default="", help="Path to an SSH public key file")
    add_verb(verbs, "delete", delete_cluster, "Delete a cluster", usage_args="<cluster-id>")
    add_verb(verbs, "show", show_cluster, "Show cluster info", usage_args="<cluster-id>")
    parser = add_verb(verbs, "list", list_clusters, "List clusters of a project")
    parser.add_argument("--tenant", default="", help="Tenant name (defaults to the selected tenant)")
    parser.add_argument("--project", default="", help="Project name (defaults to the selected project)")
    parser.add_argument("-s", "--summary", action="store_true", help="Only show state counts")
    add_verb(verbs, "list-vms", list_cluster_vms, "List the VMs of a cluster", usage_args="<cluster-id>")
    add_verb(
        verbs, "resize", resize_cluster, "Change the worker count of a cluster",
        usage_args="<cluster-id> <worker-count>",
    )

import sys
from enum import Enum

import structlog

from .clients.cloudflare_client import CloudflareClient
from .clients.compute_client import get_all_machines_ip, get_compute_client
from .config import load_app_config_from_env
from .credentials import load_credentials
from .errors import AmbiguousRecordError

log = structlog.get_logger()


class Action(Enum):
    UNCHANGED = "unchanged"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


def normalize_hostname(hostname):
    return hostname.rstrip(".")


def find_zone(hostname, zones):
    """Returns the first zone whose name is a suffix of hostname, or None."""
    for zone in zones:
        if hostname.endswith(zone.name):
            return zone
    return None


def plan_action(hostname, desired_ip, existing_records):
    """
    Decides what has to happen to the A record of a single hostname.

    Args:
        hostname (str): Normalized hostname, used in error messages.
        desired_ip (str): The machine's current IP, "" if it has none.
        existing_records (list): A records currently stored for hostname.

    Returns:
        tuple: (Action, existing record or None)

    Raises:
        AmbiguousRecordError: If more than one record exists, or the single
                              existing record has empty content.
    """
    if len(existing_records) > 1:
        raise AmbiguousRecordError(
            f"Expected {hostname} to have either 0 or 1 records, got {len(existing_records)}."
        )
    existing = existing_records[0] if existing_records else None
    existing_ip = ""
    if existing is not None:
        existing_ip = existing.content
        if not existing_ip:
            raise AmbiguousRecordError(f"Invalid existing record with empty content on {hostname}")

    if desired_ip == existing_ip:
        return Action.UNCHANGED, existing
    if not desired_ip:
        return Action.DELETE, existing
    if existing is None:
        return Action.CREATE, None
    return Action.UPDATE, existing


def reconcile(machines, dns_client, dry_run=False, out=None):
    """
    Makes the A record of every hostname in machines match its IP.

    Hostnames outside every zone of the DNS account are skipped. One status
    line per reconciled hostname is written to out. In dry-run mode the same
    lines are written but nothing is created, updated or deleted.

    The first error aborts the run; hostnames after it are left untouched.

    Args:
        machines (dict): hostname -> IP, "" meaning the machine has no IP.
        dns_client: Object with list_zones, get_dns_records, create_dns_record,
                    update_dns_record and delete_dns_record.
        dry_run (bool): Report actions without performing them.
        out: Stream for status lines, stdout by default.

    Returns:
        dict: hostname -> Action for every hostname that matched a zone.
    """
    out = out or sys.stdout
    if dry_run:
        print("Doing dry-run, no update will be applied.", file=out)

    zones = dns_client.list_zones()
    results = {}

    for raw_hostname, ip in machines.items():
        hostname = normalize_hostname(raw_hostname)
        zone = find_zone(hostname, zones)
        if zone is None:
            log.debug("Skipping hostname outside every zone", hostname=hostname)
            continue

        existing_records = dns_client.get_dns_records(zone.id, hostname)
        action, existing = plan_action(hostname, ip, existing_records)

        if action is Action.UNCHANGED:
            print(f"{hostname}: unchanged", file=out)
        elif action is Action.CREATE:
            if not dry_run:
                dns_client.create_dns_record(zone.id, hostname, ip)
            print(f"{hostname} created and set to {ip}", file=out)
        elif action is Action.UPDATE:
            if not dry_run:
                dns_client.update_dns_record(zone.id, existing.id, hostname, ip)
            print(f"{hostname} updated from {existing.content} to {ip}.", file=out)
        else:
            if not dry_run:
                dns_client.delete_dns_record(zone.id, existing.id, hostname)
            print(f"{hostname} removed (was {existing.content}).", file=out)

        results[hostname] = action

    log.info(
        "Cloud VM DNS Sync Summary",
        dry_run=dry_run,
        total_machines=len(machines),
        matched=len(results),
        changed=sum(1 for a in results.values() if a is not Action.UNCHANGED),
    )
    return results


def sync_vm_dns(dry_run=None):
    """
    Runs one full pass: loads configuration and credentials, reads the VM
    inventory and reconciles Cloudflare against it.
    """
    config = load_app_config_from_env()
    if dry_run is None:
        dry_run = config["dry_run"]

    credential = load_credentials(config["cloudflare_ini"])
    compute, project_id = get_compute_client()
    machines = get_all_machines_ip(compute, project_id, config["inventory_timeout_seconds"])

    dns_client = CloudflareClient(credential)
    return reconcile(machines, dns_client, dry_run=dry_run)

from time import monotonic

import google.auth
import requests
import structlog
from google.api_core.exceptions import GoogleAPIError
from google.api_core.gapic_v1.client_info import ClientInfo
from google.auth.exceptions import GoogleAuthError
from google.cloud import compute_v1

from ..config import USER_AGENT
from ..errors import ProviderError

log = structlog.get_logger()

COMPUTE_READONLY_SCOPE = "https://www.googleapis.com/auth/compute.readonly"


def get_compute_client():
    """
    Resolves Application Default Credentials and builds an instances client.

    Returns:
        tuple: (compute_v1.InstancesClient, project_id)

    Raises:
        ProviderError: If no credentials or no project can be found.
    """
    try:
        credentials, project_id = google.auth.default(scopes=[COMPUTE_READONLY_SCOPE])
    except GoogleAuthError as e:
        raise ProviderError(f"Unable to find default Google credentials: {e}") from e
    if not project_id:
        raise ProviderError("Default Google credentials do not name a project")

    compute = compute_v1.InstancesClient(
        credentials=credentials,
        client_info=ClientInfo(user_agent=USER_AGENT),
    )
    return compute, project_id


def _machine_entries(instance):
    for nic in instance.network_interfaces:
        if len(nic.access_configs) != 1:
            continue
        access = nic.access_configs[0]
        if not access.public_ptr_domain_name:
            continue
        yield access.public_ptr_domain_name, access.nat_i_p


def get_all_machines_ip(compute, project_id, timeout):
    """
    Lists every instance in the project, across all zones, and collects the
    public PTR name and external IP of each network interface.

    An interface contributes only if it has exactly one access config and that
    config has a PTR domain name set (Network interface tab of the console).
    The IP is empty when the machine is stopped.

    Args:
        compute (compute_v1.InstancesClient): Initialized instances client.
        project_id (str): The project to list.
        timeout (float): Wall-clock budget in seconds for the whole listing,
            shared by all result pages.

    Returns:
        dict: PTR domain name -> IP address, or "" for machines without one.

    Raises:
        ProviderError: If the listing fails or the budget is exhausted.
    """
    deadline = monotonic() + timeout
    machines = {}
    instance_count = 0
    page_token = ""
    try:
        while True:
            remaining = deadline - monotonic()
            if remaining <= 0:
                raise ProviderError(f"Listing instances took longer than {timeout}s")
            request = compute_v1.AggregatedListInstancesRequest(project=project_id)
            if page_token:
                request.page_token = page_token
            # one page per call, each bounded by what is left of the budget
            page = compute.aggregated_list(request=request, timeout=remaining)
            for scoped_list in page.items.values():
                for instance in scoped_list.instances:
                    instance_count += 1
                    for hostname, ip in _machine_entries(instance):
                        machines[hostname] = ip
            page_token = page.next_page_token
            if not page_token:
                break
    except (GoogleAPIError, GoogleAuthError, requests.exceptions.RequestException) as e:
        log.debug("Compute API error while listing instances", error=str(e), project_id=project_id)
        raise ProviderError(f"Unable to list instances of {project_id}: {e}") from e

    log.info("Fetched compute inventory", project_id=project_id, instances=instance_count, machines=len(machines))
    return machines

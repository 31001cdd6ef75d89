"""
Stage 3: Resolve Dataset — VisiHub Verify

PURPOSE:
    Find the dataset the file should be published to, creating it on first
    use. Datasets are identified by exact name within a repository and
    persist across workflow runs, so after the first run this is a single
    list call.

CALLED BY:
    verify_pipeline_main.py — after the API key has been validated.

MATCHING:
    The FIRST dataset in the server's list whose name equals dataset_path
    exactly wins. If the repository somehow holds two datasets with the same
    name, the one the server lists first is used. That is a known
    limitation; we do not try to pick between duplicates any other way.
"""

from .errors import ApiError
from .visihub_api_client import VisiHubAPI


def resolve_dataset(api: VisiHubAPI, owner: str, slug: str, dataset_path: str) -> dict:
    """
    Look up a dataset by name, creating it if absent.

    This is the ONLY public function in this file.

    Args:
        api: Authenticated VisiHub client
        owner: Repository owner
        slug: Repository slug
        dataset_path: Dataset name to match exactly

    Returns:
        dict with keys:
            - 'dataset_id': the server's identifier for the dataset
            - 'created' (bool): True if this call created it

    Raises:
        ApiError: if listing or creating fails, or creation returns no id.
    """
    datasets = api.list_datasets(owner, slug)

    match = next(
        (d for d in datasets if isinstance(d, dict) and d.get("name") == dataset_path),
        None,
    )
    if match is not None and _usable_id(match.get("id")):
        return {"dataset_id": match["id"], "created": False}

    created = api.create_dataset(owner, slug, dataset_path)
    dataset_id = created.get("dataset_id") if isinstance(created, dict) else None
    if not _usable_id(dataset_id):
        raise ApiError("create dataset", "response did not include a dataset_id")

    return {"dataset_id": dataset_id, "created": True}


def _usable_id(value) -> bool:
    return value is not None and str(value) not in ("", "null")

"""Unit tests for the Kubernetes API backed store."""

import pytest
from unittest.mock import AsyncMock, MagicMock
from kubernetes_asyncio.client import ApiClient, ApiException, AppsV1Api, V1DeploymentList
from conftest import deployment, make_body
from authproxy.common.models.keys import NamespacedName
from authproxy.resources import AuthProxyWorkload, KubernetesStore
from authproxy.types.models import Condition, ConditionStatus
from authproxy.utils.errors import ConflictError, NotFoundError, StoreError
from authproxy.workload.kinds import workload_for_kind, workload_list_for_kind

KEY = NamespacedName("default", "proxy")


@pytest.fixture
def store():
    store = KubernetesStore(MagicMock())
    store.custom_objects_api = AsyncMock()
    return store


@pytest.fixture
def apps_api(store):
    api = AsyncMock()
    store._apis[AppsV1Api] = api
    return api


def crd_coordinates():
    return dict(
        group=AuthProxyWorkload.GROUP,
        version=AuthProxyWorkload.VERSION,
        namespace="default",
        plural=AuthProxyWorkload.PLURAL_NAME,
        name="proxy",
    )


class TestKubernetesStore:

    async def test_get(self, store):
        store.custom_objects_api.get_namespaced_custom_object.return_value = make_body()
        resource = await store.get(KEY)
        assert resource.key == KEY
        store.custom_objects_api.get_namespaced_custom_object.assert_awaited_once_with(
            **crd_coordinates()
        )

    @pytest.mark.parametrize(
        "status,error",
        [(404, NotFoundError), (409, ConflictError), (500, StoreError)],
    )
    async def test_get_errors(self, store, status, error):
        store.custom_objects_api.get_namespaced_custom_object.side_effect = ApiException(
            status=status, reason="Failure"
        )
        with pytest.raises(error) as exc_info:
            await store.get(KEY)
        assert exc_info.value.status == status
        assert isinstance(exc_info.value.__cause__, ApiException)

    async def test_update_sends_whole_object(self, store):
        resource = AuthProxyWorkload(make_body())
        resource.add_finalizer()
        await store.update(resource)
        kwargs = store.custom_objects_api.replace_namespaced_custom_object.await_args.kwargs
        assert kwargs["name"] == "proxy"
        assert kwargs["body"]["metadata"]["finalizers"] == [AuthProxyWorkload.FINALIZER]
        assert kwargs["body"]["metadata"]["resourceVersion"] == "1"

    async def test_update_conflict(self, store):
        store.custom_objects_api.replace_namespaced_custom_object.side_effect = ApiException(
            status=409, reason="Conflict"
        )
        with pytest.raises(ConflictError):
            await store.update(AuthProxyWorkload(make_body()))

    async def test_patch_status(self, store):
        original = AuthProxyWorkload(make_body())
        resource = original.deep_copy()
        resource.status.conditions = [
            Condition(
                type="UpToDate",
                status=ConditionStatus.TRUE,
                observed_generation=1,
                reason="NoWorkloadsFound",
                message="No workload updates needed",
                last_transition_time="2020-01-01T00:00:00Z",
            )
        ]
        await store.patch_status(resource, original)
        api = store.custom_objects_api.patch_namespaced_custom_object_status
        kwargs = api.await_args.kwargs
        assert kwargs["body"]["metadata"] == {"resourceVersion": "1"}
        assert kwargs["body"]["status"]["conditions"][0]["type"] == "UpToDate"
        assert kwargs["_content_type"] == "application/merge-patch+json"

    async def test_patch_status_unchanged_is_skipped(self, store):
        original = AuthProxyWorkload(make_body())
        await store.patch_status(original.deep_copy(), original)
        store.custom_objects_api.patch_namespaced_custom_object_status.assert_not_awaited()

    async def test_get_workload(self, store, apps_api):
        apps_api.read_namespaced_deployment.return_value = deployment("app")
        workload = await store.get_workload(
            NamespacedName("default", "app"), workload_for_kind("Deployment")
        )
        assert workload.name == "app"
        apps_api.read_namespaced_deployment.assert_awaited_once_with(
            name="app", namespace="default"
        )

    async def test_get_workload_not_found(self, store, apps_api):
        apps_api.read_namespaced_deployment.side_effect = ApiException(
            status=404, reason="Not Found"
        )
        with pytest.raises(NotFoundError):
            await store.get_workload(
                NamespacedName("default", "app"), workload_for_kind("Deployment")
            )

    async def test_list_workloads(self, store, apps_api):
        apps_api.list_namespaced_deployment.return_value = V1DeploymentList(
            items=[deployment("a"), deployment("b")]
        )
        workload_list = await store.list_workloads(
            "default", "tier=web", workload_list_for_kind("Deployment")
        )
        assert [w.name for w in workload_list.workloads()] == ["a", "b"]
        apps_api.list_namespaced_deployment.assert_awaited_once_with(
            namespace="default", label_selector="tier=web"
        )

    def test_api_instances_are_cached(self):
        store = KubernetesStore(MagicMock())
        workload_cls = type(workload_for_kind("Deployment"))
        assert store._api_for(workload_cls) is store._api_for(workload_cls)


class TestKubernetesStoreRequests:
    """Checks the requests handed to the REST client by a real ApiClient."""

    async def test_patch_status_sends_merge_patch(self):
        api_client = ApiClient()
        api_client.rest_client.request = AsyncMock(
            side_effect=ApiException(status=500, reason="Stopped")
        )
        store = KubernetesStore(api_client)
        original = AuthProxyWorkload(make_body())
        resource = original.deep_copy()
        resource.status.conditions = [
            Condition(
                type="UpToDate",
                status=ConditionStatus.TRUE,
                observed_generation=1,
                reason="NoWorkloadsFound",
                message="No workload updates needed",
                last_transition_time="2020-01-01T00:00:00Z",
            )
        ]
        try:
            with pytest.raises(StoreError):
                await store.patch_status(resource, original)
        finally:
            await api_client.close()

        call = api_client.rest_client.request.await_args
        assert "PATCH" in call.args
        assert call.kwargs["headers"]["Content-Type"] == "application/merge-patch+json"

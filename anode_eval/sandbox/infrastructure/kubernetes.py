"""KubernetesPodProvider — runs each work item in its own Kubernetes pod.

The official client is synchronous; every API call is moved off the event loop
with `asyncio.to_thread`.
Transport failures (urllib3 `HTTPError`: refused connections, exhausted
retries, broken responses) map to the same errors as API rejections.
"""

import asyncio
import hashlib

from kubernetes import client, config
from kubernetes.client import ApiException
from kubernetes.config import ConfigException
from urllib3.exceptions import HTTPError

from anode_eval.sandbox.domain.spec import PodPhase, SandboxHandle, SandboxSpec
from anode_eval.sandbox.infrastructure.entrypoint import entrypoint_script
from anode_eval.sandbox.infrastructure.errors import (
    CollectionError,
    ProviderUnavailableError,
    SandboxDeleteError,
    SchedulingError,
)

APP_LABEL = "anode-eval"
RUN_ID_LABEL = "anode-eval/run-id"
WORK_ID_LABEL = "anode-eval/work-id"
DEFAULT_IMAGE = "anode-eval-agent:latest"

_FAILED_WAITING_MARKERS = ("Err", "BackOff", "CrashLoop")


def pod_name(spec: SandboxSpec) -> str:
    """DNS-1123 pod name, unique per work item."""
    return f"anode-eval-{spec.run_id[:8].lower()}-{_digest(spec.work_id)[:10]}"


def _digest(value: str) -> str:
    return hashlib.sha1(value.encode("utf-8")).hexdigest()


def _run_selector(run_id: str) -> str:
    return f"app={APP_LABEL},{RUN_ID_LABEL}={run_id}"


def load_core_api() -> client.CoreV1Api:
    """In-cluster service account first, then the local kubeconfig."""
    try:
        config.load_incluster_config()
    except ConfigException:
        config.load_kube_config()
    return client.CoreV1Api()


def build_pod(
    spec: SandboxSpec, namespace: str, image: str = DEFAULT_IMAGE
) -> client.V1Pod:
    env = {
        **spec.env,
        "ANODE_RUN_ID": spec.run_id,
        "ANODE_WORK_ID": spec.work_id,
        "ANODE_AGENT_TOOL": spec.tool,
        "ANODE_MODEL": spec.model,
        "ANODE_ITERATION": str(spec.iteration),
        "ANODE_TIMEOUT_HOURS": f"{spec.timeout_seconds / 3600:g}",
    }
    container = client.V1Container(
        name="agent",
        image=image,
        image_pull_policy="IfNotPresent",
        command=["/bin/bash", "-c"],
        args=[entrypoint_script(spec)],
        env=[client.V1EnvVar(name=key, value=value) for key, value in env.items()],
        resources=client.V1ResourceRequirements(
            limits={"cpu": "1", "memory": "1Gi"},
            requests={"cpu": "500m", "memory": "512Mi"},
        ),
        security_context=client.V1SecurityContext(
            run_as_non_root=True, run_as_user=1000
        ),
        volume_mounts=[client.V1VolumeMount(name="workspace", mount_path="/workspace")],
        working_dir="/workspace",
    )
    return client.V1Pod(
        metadata=client.V1ObjectMeta(
            name=pod_name(spec),
            namespace=namespace,
            labels={
                "app": APP_LABEL,
                RUN_ID_LABEL: spec.run_id,
                WORK_ID_LABEL: _digest(spec.work_id)[:16],
            },
            annotations={
                "anode-eval/work-id": spec.work_id,
                "anode-eval/prompt-id": spec.prompt_id,
                "anode-eval/eval-path": spec.eval_path,
            },
        ),
        spec=client.V1PodSpec(
            containers=[container],
            restart_policy="Never",
            active_deadline_seconds=max(1, int(spec.timeout_seconds)),
            volumes=[
                client.V1Volume(
                    name="workspace", empty_dir=client.V1EmptyDirVolumeSource()
                )
            ],
        ),
    )


def classify_pod(pod: client.V1Pod) -> PodPhase:
    """Map pod status to a PodPhase, treating failed containers as Failed."""
    status = pod.status
    if status is None:
        return PodPhase.UNKNOWN
    for container_status in status.container_statuses or []:
        state = container_status.state
        if state is None:
            continue
        if state.terminated is not None and state.terminated.exit_code != 0:
            return PodPhase.FAILED
        reason = state.waiting.reason if state.waiting is not None else None
        if reason and any(marker in reason for marker in _FAILED_WAITING_MARKERS):
            return PodPhase.FAILED
    try:
        return PodPhase(status.phase)
    except ValueError:
        return PodPhase.UNKNOWN


def _failure_reason(pod: client.V1Pod) -> str | None:
    status = pod.status
    if status is None:
        return None
    for container_status in status.container_statuses or []:
        state = container_status.state
        if state is None:
            continue
        if state.terminated is not None and state.terminated.exit_code != 0:
            return (
                f"container exited with code {state.terminated.exit_code}"
                f" ({state.terminated.reason})"
            )
        if state.waiting is not None and state.waiting.reason:
            return f"container waiting: {state.waiting.reason}"
    return status.reason or status.message


class KubernetesPodProvider:
    """PodProvider backed by the Kubernetes core/v1 API.

    Does NOT inherit from PodProvider (structural typing via Protocol).
    """

    def __init__(
        self,
        namespace: str,
        api: client.CoreV1Api | None = None,
        image: str = DEFAULT_IMAGE,
    ) -> None:
        self._namespace = namespace
        self._api = api
        self._image = image

    def _core(self) -> client.CoreV1Api:
        if self._api is None:
            try:
                self._api = load_core_api()
            except ConfigException as exc:
                raise ProviderUnavailableError(str(exc)) from exc
        return self._api

    async def create(self, spec: SandboxSpec) -> SandboxHandle:
        pod = build_pod(spec=spec, namespace=self._namespace, image=self._image)
        try:
            created = await asyncio.to_thread(
                self._core().create_namespaced_pod, self._namespace, pod
            )
        except ApiException as exc:
            raise SchedulingError(
                work_id=spec.work_id, reason=f"{exc.status} {exc.reason}"
            ) from exc
        except HTTPError as exc:
            raise SchedulingError(work_id=spec.work_id, reason=str(exc)) from exc
        return created.metadata.name

    async def _read(self, handle: SandboxHandle) -> client.V1Pod | None:
        """Return the pod, or None when it is gone or the API call failed.

        Both cases read as `Unknown`; the controller keeps polling until the
        work item deadline.
        """
        try:
            return await asyncio.to_thread(
                self._core().read_namespaced_pod_status, handle, self._namespace
            )
        except (ApiException, HTTPError):
            return None

    async def phase(self, handle: SandboxHandle) -> PodPhase:
        pod = await self._read(handle)
        if pod is None:
            return PodPhase.UNKNOWN
        return classify_pod(pod)

    async def failure_reason(self, handle: SandboxHandle) -> str | None:
        pod = await self._read(handle)
        if pod is None:
            return "pod not found"
        return _failure_reason(pod)

    async def logs(self, handle: SandboxHandle) -> bytes:
        try:
            text = await asyncio.to_thread(
                self._core().read_namespaced_pod_log, handle, self._namespace
            )
        except ApiException as exc:
            raise CollectionError(
                handle=handle, reason=f"{exc.status} {exc.reason}"
            ) from exc
        except HTTPError as exc:
            raise CollectionError(handle=handle, reason=str(exc)) from exc
        return (text or "").encode("utf-8")

    async def delete(self, handle: SandboxHandle) -> None:
        try:
            await asyncio.to_thread(
                self._core().delete_namespaced_pod,
                handle,
                self._namespace,
                grace_period_seconds=0,
            )
        except ApiException as exc:
            if exc.status == 404:
                return
            raise SandboxDeleteError(
                handle=handle, reason=f"{exc.status} {exc.reason}"
            ) from exc
        except HTTPError as exc:
            raise SandboxDeleteError(handle=handle, reason=str(exc)) from exc

    async def list_for_run(self, run_id: str) -> list[SandboxHandle]:
        try:
            pods = await asyncio.to_thread(
                self._core().list_namespaced_pod,
                self._namespace,
                label_selector=_run_selector(run_id),
            )
        except ApiException as exc:
            raise ProviderUnavailableError(f"{exc.status} {exc.reason}") from exc
        except HTTPError as exc:
            raise ProviderUnavailableError(str(exc)) from exc
        return [pod.metadata.name for pod in pods.items]

"""obs-websocket v5 client built on aiohttp."""

from __future__ import annotations

import asyncio
import base64
import contextlib
import hashlib
import json
import logging
import uuid
from typing import Any, Optional

import aiohttp

from obsmacros.core.errors import RemoteCommandError, RemoteConnectError
from obsmacros.remote.base import ConnectionState, Credentials, InputInfo, SceneItem

OP_HELLO = 0
OP_IDENTIFY = 1
OP_IDENTIFIED = 2
OP_REQUEST = 6
OP_REQUEST_RESPONSE = 7

RPC_VERSION = 1
CLOSE_AUTHENTICATION_FAILED = 4009

LOGGER = logging.getLogger(__name__)


def auth_response(password: str, salt: str, challenge: str) -> str:
    """Build the Identify authentication string from the Hello challenge."""
    secret = base64.b64encode(hashlib.sha256((password + salt).encode("utf-8")).digest())
    digest = hashlib.sha256(secret + challenge.encode("utf-8")).digest()
    return base64.b64encode(digest).decode("ascii")


class ObsWebSocketClient:
    """
    One authenticated session against OBS.

    connect() returns only after OBS acknowledged Identify and the receive task
    is running, so requests can be issued right away.
    """

    def __init__(self, *, request_timeout_s: float = 10.0) -> None:
        self._request_timeout_s = request_timeout_s
        self._session: Optional[aiohttp.ClientSession] = None
        self._ws: Optional[aiohttp.ClientWebSocketResponse] = None
        self._recv_task: Optional[asyncio.Task[None]] = None
        self._pending: dict[str, asyncio.Future[dict[str, Any]]] = {}
        self._state = ConnectionState.DISCONNECTED

    @property
    def state(self) -> ConnectionState:
        return self._state

    # ── Session lifecycle ────────────────────────────────────────────────────

    async def connect(self, credentials: Credentials) -> None:
        await self.disconnect()

        url = f"ws://{credentials.host}:{credentials.port}"
        self._state = ConnectionState.CONNECTING
        session = await self._ensure_session()
        try:
            ws = await asyncio.wait_for(
                session.ws_connect(url, heartbeat=30, autoping=True),
                timeout=self._request_timeout_s,
            )
        except (aiohttp.ClientError, OSError, asyncio.TimeoutError) as exc:
            await self._teardown()
            raise RemoteConnectError(f"Could not connect to OBS at {url}: {exc}") from exc

        self._ws = ws
        try:
            await asyncio.wait_for(self._identify(ws, credentials.password), timeout=self._request_timeout_s)
        except RemoteConnectError:
            await self._teardown()
            raise
        except (aiohttp.ClientError, OSError, asyncio.TimeoutError, ValueError, KeyError, TypeError) as exc:
            await self._teardown()
            raise RemoteConnectError(f"OBS handshake failed at {url}: {exc}") from exc

        ready = asyncio.Event()
        self._recv_task = asyncio.create_task(self._recv_loop(ws, ready))
        await ready.wait()
        self._state = ConnectionState.CONNECTED
        LOGGER.info("Connected to OBS at %s", url)

    async def disconnect(self) -> None:
        if self._state is ConnectionState.DISCONNECTED and self._ws is None and self._session is None:
            return
        self._state = ConnectionState.DISCONNECTING
        await self._teardown()
        LOGGER.info("Disconnected from OBS")

    # ── Queries ──────────────────────────────────────────────────────────────

    async def get_scene_list(self) -> list[str]:
        data = await self._request("GetSceneList")
        return [str(s.get("sceneName", "")) for s in data.get("scenes") or []]

    async def get_scene_item_list(self, scene_name: str) -> list[SceneItem]:
        data = await self._request("GetSceneItemList", {"sceneName": scene_name})
        return [
            SceneItem(item_id=int(item["sceneItemId"]), source_name=str(item.get("sourceName", "")))
            for item in data.get("sceneItems") or []
        ]

    async def get_input_list(self) -> list[InputInfo]:
        data = await self._request("GetInputList")
        return [
            InputInfo(name=str(i.get("inputName", "")), kind=str(i.get("inputKind") or ""))
            for i in data.get("inputs") or []
        ]

    async def get_hotkey_list(self) -> list[str]:
        data = await self._request("GetHotkeyList")
        return [str(h) for h in data.get("hotkeys") or []]

    # ── Commands ─────────────────────────────────────────────────────────────

    async def set_current_program_scene(self, scene_name: str) -> None:
        await self._request("SetCurrentProgramScene", {"sceneName": scene_name})

    async def set_scene_item_enabled(self, scene_name: str, item_id: int, enabled: bool) -> None:
        await self._request(
            "SetSceneItemEnabled",
            {"sceneName": scene_name, "sceneItemId": item_id, "sceneItemEnabled": enabled},
        )

    async def set_input_mute(self, input_name: str, muted: bool) -> None:
        await self._request("SetInputMute", {"inputName": input_name, "inputMuted": muted})

    async def trigger_hotkey_by_name(self, hotkey_name: str) -> None:
        await self._request("TriggerHotkeyByName", {"hotkeyName": hotkey_name})

    # ── Internals ────────────────────────────────────────────────────────────

    async def _identify(self, ws: aiohttp.ClientWebSocketResponse, password: str) -> None:
        hello = await self._receive_op(ws)
        if hello.get("op") != OP_HELLO:
            raise RemoteConnectError(f"Unexpected handshake message: op={hello.get('op')}")

        identify: dict[str, Any] = {"rpcVersion": RPC_VERSION, "eventSubscriptions": 0}
        auth = (hello.get("d") or {}).get("authentication")
        if auth:
            identify["authentication"] = auth_response(password, auth["salt"], auth["challenge"])
        await ws.send_json({"op": OP_IDENTIFY, "d": identify})

        identified = await self._receive_op(ws)
        if identified.get("op") != OP_IDENTIFIED:
            raise RemoteConnectError(f"Unexpected handshake message: op={identified.get('op')}")

    async def _receive_op(self, ws: aiohttp.ClientWebSocketResponse) -> dict[str, Any]:
        msg = await ws.receive()
        if msg.type == aiohttp.WSMsgType.TEXT:
            data = json.loads(msg.data)
            if not isinstance(data, dict):
                raise ValueError("message is not an object")
            return data
        if ws.close_code == CLOSE_AUTHENTICATION_FAILED:
            raise RemoteConnectError("OBS rejected the password")
        raise RemoteConnectError(f"OBS closed the connection during handshake (code {ws.close_code})")

    async def _recv_loop(self, ws: aiohttp.ClientWebSocketResponse, ready: asyncio.Event) -> None:
        ready.set()
        try:
            while True:
                msg = await ws.receive()
                if msg.type == aiohttp.WSMsgType.TEXT:
                    try:
                        data = json.loads(msg.data)
                    except ValueError:
                        LOGGER.warning("Ignoring non-JSON message from OBS")
                        continue
                    if isinstance(data, dict) and data.get("op") == OP_REQUEST_RESPONSE:
                        self._resolve(data.get("d") or {})
                elif msg.type in (
                    aiohttp.WSMsgType.CLOSE,
                    aiohttp.WSMsgType.CLOSING,
                    aiohttp.WSMsgType.CLOSED,
                    aiohttp.WSMsgType.ERROR,
                ):
                    break
        finally:
            self._fail_pending(RemoteCommandError("Connection to OBS closed"))
            if self._state is ConnectionState.CONNECTED:
                LOGGER.warning("OBS closed the connection")
                self._state = ConnectionState.DISCONNECTED

    def _resolve(self, response: dict[str, Any]) -> None:
        fut = self._pending.get(str(response.get("requestId")))
        if fut is not None and not fut.done():
            fut.set_result(response)

    def _fail_pending(self, exc: Exception) -> None:
        pending, self._pending = self._pending, {}
        for fut in pending.values():
            if not fut.done():
                fut.set_exception(exc)

    async def _request(self, request_type: str, request_data: dict[str, Any] | None = None) -> dict[str, Any]:
        ws = self._ws
        if ws is None or ws.closed or self._state is not ConnectionState.CONNECTED:
            raise RemoteCommandError(f"{request_type} failed: not connected to OBS")

        request_id = uuid.uuid4().hex
        fut: asyncio.Future[dict[str, Any]] = asyncio.get_running_loop().create_future()
        self._pending[request_id] = fut
        payload: dict[str, Any] = {"requestType": request_type, "requestId": request_id}
        if request_data is not None:
            payload["requestData"] = request_data
        try:
            await ws.send_json({"op": OP_REQUEST, "d": payload})
            response = await asyncio.wait_for(fut, timeout=self._request_timeout_s)
        except asyncio.TimeoutError as exc:
            LOGGER.warning("%s timed out", request_type)
            raise RemoteCommandError(
                f"{request_type} timed out after {self._request_timeout_s:g}s"
            ) from exc
        except (aiohttp.ClientError, ConnectionError) as exc:
            LOGGER.warning("%s could not be sent: %s", request_type, exc)
            raise RemoteCommandError(f"{request_type} failed: {exc}") from exc
        finally:
            self._pending.pop(request_id, None)

        status = response.get("requestStatus") or {}
        if not status.get("result"):
            code = status.get("code")
            comment = status.get("comment") or "request rejected"
            LOGGER.warning("%s rejected by OBS (code %s): %s", request_type, code, comment)
            raise RemoteCommandError(f"{request_type} failed (code {code}): {comment}")
        return response.get("responseData") or {}

    async def _teardown(self) -> None:
        task, self._recv_task = self._recv_task, None
        if task is not None:
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        await self._close_ws()
        self._fail_pending(RemoteCommandError("Connection to OBS closed"))
        await self._close_session()
        self._state = ConnectionState.DISCONNECTED

    async def _close_ws(self) -> None:
        ws, self._ws = self._ws, None
        if ws:
            with contextlib.suppress(Exception):
                await ws.close()

    async def _close_session(self) -> None:
        sess, self._session = self._session, None
        if sess:
            with contextlib.suppress(Exception):
                await sess.close()

    async def _ensure_session(self) -> aiohttp.ClientSession:
        session = self._session
        if session is None or session.closed:
            self._session = session = aiohttp.ClientSession()
        return session

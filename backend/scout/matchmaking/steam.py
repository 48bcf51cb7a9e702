"""Steamworks matchmaking client over the flat C API.

Binds the Steamworks redistributable (steam_api64.dll / libsteam_api.so /
libsteam_api.dylib) with ctypes and uses manual callback dispatch, so that
asynchronous call results are only delivered from `run_callbacks`. Lobby
list completions are matched to their requests through a registry keyed by
the SteamAPICall_t handle.
"""

from __future__ import annotations

import ctypes
import os
import sys
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from scout.exceptions import ClientInitError, LobbyListError

if TYPE_CHECKING:
    from scout.discovery.models import LobbyId, LobbyListFilter
    from scout.matchmaking.client import LobbyListCallback

logger = structlog.get_logger()

_MATCHMAKING_ACCESSOR = "SteamAPI_SteamMatchmaking_v009"

# Callback ids: k_iSteamUtilsCallbacks + 3 and k_iSteamMatchmakingCallbacks + 10.
_API_CALL_COMPLETED_ID = 703
_LOBBY_MATCH_LIST_ID = 510

_LOBBY_COMPARISON_EQUAL = 0
_API_CALL_INVALID = 0
_INIT_OK = 0
_INIT_ERROR_BUFFER_SIZE = 1024


class _CallbackMsg(ctypes.Structure):
    _fields_ = [
        ("user", ctypes.c_int32),
        ("callback_id", ctypes.c_int),
        ("param", ctypes.c_void_p),
        ("param_size", ctypes.c_int),
    ]


class _APICallCompleted(ctypes.Structure):
    _fields_ = [
        ("api_call", ctypes.c_uint64),
        ("callback_id", ctypes.c_int),
        ("param_size", ctypes.c_uint32),
    ]


class _LobbyMatchList(ctypes.Structure):
    _fields_ = [("lobbies_matching", ctypes.c_uint32)]


def default_library_path() -> str:
    """Return the Steamworks library in the working directory, or its bare name for the loader."""
    if sys.platform == "win32":
        name = "steam_api64.dll"
    elif sys.platform == "darwin":
        name = "libsteam_api.dylib"
    else:
        name = "libsteam_api.so"
    local = Path.cwd() / name
    return str(local) if local.exists() else name


def _declare_signatures(lib: ctypes.CDLL) -> None:
    c_pipe = ctypes.c_int32
    c_steamid = ctypes.c_uint64
    signatures: dict[str, tuple[object, list[object]]] = {
        "SteamAPI_Shutdown": (None, []),
        "SteamAPI_GetHSteamPipe": (c_pipe, []),
        "SteamAPI_ManualDispatch_Init": (None, []),
        "SteamAPI_ManualDispatch_RunFrame": (None, [c_pipe]),
        "SteamAPI_ManualDispatch_GetNextCallback": (ctypes.c_bool, [c_pipe, ctypes.POINTER(_CallbackMsg)]),
        "SteamAPI_ManualDispatch_FreeLastCallback": (None, [c_pipe]),
        "SteamAPI_ManualDispatch_GetAPICallResult": (
            ctypes.c_bool,
            [c_pipe, ctypes.c_uint64, ctypes.c_void_p, ctypes.c_int, ctypes.c_int, ctypes.POINTER(ctypes.c_bool)],
        ),
        _MATCHMAKING_ACCESSOR: (ctypes.c_void_p, []),
        "SteamAPI_ISteamMatchmaking_AddRequestLobbyListStringFilter": (
            None,
            [ctypes.c_void_p, ctypes.c_char_p, ctypes.c_char_p, ctypes.c_int],
        ),
        "SteamAPI_ISteamMatchmaking_RequestLobbyList": (ctypes.c_uint64, [ctypes.c_void_p]),
        "SteamAPI_ISteamMatchmaking_GetLobbyByIndex": (c_steamid, [ctypes.c_void_p, ctypes.c_int]),
        "SteamAPI_ISteamMatchmaking_GetLobbyData": (ctypes.c_char_p, [ctypes.c_void_p, c_steamid, ctypes.c_char_p]),
        "SteamAPI_ISteamMatchmaking_GetLobbyMemberLimit": (ctypes.c_int, [ctypes.c_void_p, c_steamid]),
        "SteamAPI_ISteamMatchmaking_GetNumLobbyMembers": (ctypes.c_int, [ctypes.c_void_p, c_steamid]),
    }
    for name, (restype, argtypes) in signatures.items():
        try:
            func = getattr(lib, name)
        except AttributeError as e:
            raise ClientInitError(f"Steamworks library is missing {name}; SDK 1.50 or newer is required") from e
        func.restype = restype
        func.argtypes = argtypes


def _init_api(lib: ctypes.CDLL) -> None:
    # SDK 1.58+ exports SteamAPI_InitFlat; older SDKs export SteamAPI_Init.
    if hasattr(lib, "SteamAPI_InitFlat"):
        init_flat = lib.SteamAPI_InitFlat
        init_flat.restype = ctypes.c_int
        init_flat.argtypes = [ctypes.c_char_p]
        error = ctypes.create_string_buffer(_INIT_ERROR_BUFFER_SIZE)
        result = init_flat(error)
        if result != _INIT_OK:
            detail = error.value.decode("utf-8", errors="replace") or "unknown error"
            raise ClientInitError(f"Steam API initialisation failed ({result}): {detail}")
        return

    init = lib.SteamAPI_Init
    init.restype = ctypes.c_bool
    init.argtypes = []
    if not init():
        raise ClientInitError("Steam API initialisation failed; is the Steam client running and logged in?")


class SteamMatchmakingClient:
    """MatchmakingClient implementation backed by ISteamMatchmaking."""

    def __init__(self, lib: ctypes.CDLL, pipe: int, matchmaking: int) -> None:
        self._lib = lib
        self._pipe = pipe
        self._matchmaking = matchmaking
        self._pending: dict[int, LobbyListCallback] = {}
        self._rejected: list[LobbyListCallback] = []

    @classmethod
    def init(cls, app_id: int, library_path: str | None = None) -> SteamMatchmakingClient:
        """Load the Steamworks library and initialise the API for `app_id`.

        Raises ClientInitError if the library cannot be loaded, lacks the
        flat API, or Steam refuses to initialise.
        """
        path = library_path or default_library_path()
        try:
            lib = ctypes.CDLL(path)
        except OSError as e:
            raise ClientInitError(f"cannot load Steamworks library {path!r}: {e}") from e

        _declare_signatures(lib)

        os.environ["SteamAppId"] = str(app_id)
        os.environ["SteamGameId"] = str(app_id)
        _init_api(lib)

        lib.SteamAPI_ManualDispatch_Init()
        pipe = lib.SteamAPI_GetHSteamPipe()
        matchmaking = getattr(lib, _MATCHMAKING_ACCESSOR)()
        if not matchmaking:
            lib.SteamAPI_Shutdown()
            raise ClientInitError("Steam matchmaking interface is unavailable")

        logger.info("steam client initialised", app_id=app_id, library=path)
        return cls(lib, pipe, matchmaking)

    def request_lobby_list(self, lobby_filter: LobbyListFilter, on_complete: LobbyListCallback) -> None:
        add_filter = self._lib.SteamAPI_ISteamMatchmaking_AddRequestLobbyListStringFilter
        for string_filter in lobby_filter.strings:
            add_filter(
                self._matchmaking,
                string_filter.key.encode("utf-8"),
                string_filter.value.encode("utf-8"),
                _LOBBY_COMPARISON_EQUAL,
            )

        api_call = self._lib.SteamAPI_ISteamMatchmaking_RequestLobbyList(self._matchmaking)
        if api_call == _API_CALL_INVALID:
            # Reported from the next run_callbacks, like any other completion.
            self._rejected.append(on_complete)
            return
        self._pending[api_call] = on_complete
        logger.debug("lobby list requested", api_call=api_call, filters=len(lobby_filter.strings))

    def lobby_data(self, lobby_id: LobbyId, key: str) -> str | None:
        value = self._lib.SteamAPI_ISteamMatchmaking_GetLobbyData(self._matchmaking, lobby_id, key.encode("utf-8"))
        if not value:
            return None
        return value.decode("utf-8", errors="replace")

    def lobby_member_limit(self, lobby_id: LobbyId) -> int | None:
        limit = self._lib.SteamAPI_ISteamMatchmaking_GetLobbyMemberLimit(self._matchmaking, lobby_id)
        return limit or None

    def lobby_member_count(self, lobby_id: LobbyId) -> int:
        return self._lib.SteamAPI_ISteamMatchmaking_GetNumLobbyMembers(self._matchmaking, lobby_id)

    def run_callbacks(self) -> None:
        ready: list[tuple[LobbyListCallback, list[LobbyId] | LobbyListError]] = [
            (on_complete, LobbyListError("Steam rejected the lobby list request")) for on_complete in self._rejected
        ]
        self._rejected.clear()

        self._lib.SteamAPI_ManualDispatch_RunFrame(self._pipe)
        msg = _CallbackMsg()
        while self._lib.SteamAPI_ManualDispatch_GetNextCallback(self._pipe, ctypes.byref(msg)):
            try:
                if msg.callback_id == _API_CALL_COMPLETED_ID:
                    completed = ctypes.cast(msg.param, ctypes.POINTER(_APICallCompleted)).contents
                    delivery = self._collect_call_result(completed.api_call)
                    if delivery is not None:
                        ready.append(delivery)
            finally:
                self._lib.SteamAPI_ManualDispatch_FreeLastCallback(self._pipe)

        for on_complete, result in ready:
            on_complete(result)

    def shutdown(self) -> None:
        self._pending.clear()
        self._rejected.clear()
        self._lib.SteamAPI_Shutdown()
        logger.info("steam client shut down")

    def _collect_call_result(
        self,
        api_call: int,
    ) -> tuple[LobbyListCallback, list[LobbyId] | LobbyListError] | None:
        on_complete = self._pending.pop(api_call, None)
        if on_complete is None:
            return None

        match_list = _LobbyMatchList()
        failed = ctypes.c_bool(False)
        ok = self._lib.SteamAPI_ManualDispatch_GetAPICallResult(
            self._pipe,
            api_call,
            ctypes.byref(match_list),
            ctypes.sizeof(match_list),
            _LOBBY_MATCH_LIST_ID,
            ctypes.byref(failed),
        )
        if not ok or failed.value:
            return on_complete, LobbyListError(f"lobby list request {api_call} failed")

        get_lobby = self._lib.SteamAPI_ISteamMatchmaking_GetLobbyByIndex
        lobby_ids = [get_lobby(self._matchmaking, index) for index in range(match_list.lobbies_matching)]
        logger.debug("lobby list received", api_call=api_call, lobby_ids=lobby_ids)
        return on_complete, lobby_ids

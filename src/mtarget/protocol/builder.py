from __future__ import annotations

import datetime
from typing import Any, Dict, List, Optional, Sequence

from .. import parameters as params
from . import fields


# Keys in the identity snapshot, as published by an identity provider.

IDENTITY_MID = "mid"
IDENTITY_BLOB = "blob"
IDENTITY_LOCATION_HINT = "locationhint"
IDENTITY_VISITOR_IDS = "visitorids"

VISITOR_ID = "id"
VISITOR_ID_TYPE = "id.type"
VISITOR_AUTH_STATE = "authentication.state"

_auth_states = {
    0: fields.UNKNOWN,
    1: fields.AUTHENTICATED,
    2: fields.LOGGED_OUT,
    fields.UNKNOWN: fields.UNKNOWN,
    fields.AUTHENTICATED: fields.AUTHENTICATED,
    fields.LOGGED_OUT: fields.LOGGED_OUT,
}

# Lifecycle context data keys and the "a." context data keys they are
# reported as in mbox parameters.

LIFECYCLE_KEYS = {
    "advertisingidentifier": "a.adid",
    "appid": "a.AppID",
    "carriername": "a.CarrierName",
    "crashevent": "a.CrashEvent",
    "dailyenguserevent": "a.DailyEngUserEvent",
    "dayofweek": "a.DayOfWeek",
    "dayssincefirstuse": "a.DaysSinceFirstUse",
    "dayssincelastuse": "a.DaysSinceLastUse",
    "dayssincelastupgrade": "a.DaysSinceLastUpgrade",
    "devicename": "a.DeviceName",
    "resolution": "a.Resolution",
    "hourofday": "a.HourOfDay",
    "ignoredsessionlength": "a.ignoredSessionLength",
    "installdate": "a.InstallDate",
    "installevent": "a.InstallEvent",
    "launchevent": "a.LaunchEvent",
    "launches": "a.Launches",
    "launchessinceupgrade": "a.LaunchesSinceUpgrade",
    "locale": "a.locale",
    "monthlyenguserevent": "a.MonthlyEngUserEvent",
    "osversion": "a.OSVersion",
    "prevsessionlength": "a.PrevSessionLength",
    "runmode": "a.RunMode",
    "upgradeevent": "a.UpgradeEvent",
}


def lifecycle_context(lifecycle: Optional[Dict[str, Any]]) -> Dict[str, str]:
    """Map raw lifecycle context data to "a." context data keys."""

    mapped: Dict[str, str] = {}

    if not lifecycle:
        return mapped

    for key, value in lifecycle.items():
        if value is None:
            continue
        mapped[LIFECYCLE_KEYS.get(key, key)] = str(value)

    return mapped


class Device:
    """Read-only snapshot of the device and application, for the context node."""

    def __init__(self, platform_type: str = "android", device_name: Optional[str] = None,
                 device_type: str = "phone", application_id: Optional[str] = None,
                 application_name: Optional[str] = None,
                 application_version: Optional[str] = None,
                 screen_width: int = 0, screen_height: int = 0,
                 orientation: Optional[str] = None, user_agent: Optional[str] = None):

        self.platform_type = platform_type
        self.device_name = device_name
        self.device_type = device_type
        self.application_id = application_id
        self.application_name = application_name
        self.application_version = application_version
        self.screen_width = screen_width
        self.screen_height = screen_height
        self.orientation = orientation
        self.user_agent = user_agent

    def to_context(self) -> Dict[str, Any]:

        platform: Dict[str, Any] = {fields.PLATFORM_TYPE: self.platform_type}
        if self.device_name:
            platform[fields.DEVICE_NAME] = self.device_name
        if self.device_type:
            platform[fields.DEVICE_TYPE] = self.device_type

        context: Dict[str, Any] = {
            fields.CHANNEL: fields.CHANNEL_MOBILE,
            fields.MOBILE_PLATFORM: platform,
        }

        application: Dict[str, Any] = {}
        if self.application_id:
            application[fields.ID] = self.application_id
        if self.application_name:
            application[fields.APPLICATION_NAME] = self.application_name
        if self.application_version:
            application[fields.APPLICATION_VERSION] = self.application_version
        if application:
            context[fields.APPLICATION] = application

        if self.screen_width > 0 and self.screen_height > 0:
            screen: Dict[str, Any] = {
                fields.WIDTH: self.screen_width,
                fields.HEIGHT: self.screen_height,
                fields.COLOR_DEPTH: fields.DEFAULT_COLOR_DEPTH,
            }
            if self.orientation:
                screen[fields.ORIENTATION] = self.orientation
            context[fields.SCREEN] = screen

        if self.user_agent:
            context[fields.USER_AGENT] = self.user_agent

        context[fields.TIME_OFFSET] = time_offset_minutes()
        return context


def time_offset_minutes() -> int:
    """Local offset from UTC, in minutes, daylight saving included."""

    offset = datetime.datetime.now().astimezone().utcoffset()
    if offset is None:
        return 0
    return int(offset.total_seconds() // 60)


class RequestBuilder:
    """Fluent construction of one delivery API request document.

    Every setter returns the builder; :meth:`build` assembles the document.
    A builder is meant to be used for a single request.
    """

    def __init__(self, device: Optional[Device] = None):
        self._device = device if device is not None else Device()

        self._tnt_id: Optional[str] = None
        self._third_party_id: Optional[str] = None
        self._identity: Dict[str, Any] = {}
        self._environment_id: int = 0
        self._property_token: str = ""
        self._lifecycle: Dict[str, str] = {}
        self._attached_profile: Dict[str, str] = {}
        self._execute: Optional[List[Dict[str, Any]]] = None
        self._prefetch: Optional[List[Dict[str, Any]]] = None
        self._notifications: List[Dict[str, Any]] = []
        self._raw: Dict[str, Any] = {}
        self._found_tokens: List[str] = []

    # Global state
    def identifiers(self, tnt_id: Optional[str], third_party_id: Optional[str]):
        self._tnt_id = tnt_id
        self._third_party_id = third_party_id
        return self

    def identity(self, snapshot: Optional[Dict[str, Any]]):
        self._identity = dict(snapshot or {})
        return self

    def environment(self, environment_id: int):
        self._environment_id = environment_id or 0
        return self

    def property_token(self, token: Optional[str]):
        self._property_token = token or ""
        return self

    def lifecycle(self, data: Optional[Dict[str, Any]]):
        self._lifecycle = lifecycle_context(data)
        return self

    def attached_profile(self, data: Optional[Dict[str, Any]]):
        self._attached_profile = params.stringify(data)
        return self

    # Content
    def execute(self, requests: Sequence[Any], global_parameters=None):
        self._execute = self._mboxes(requests, global_parameters)
        return self

    def prefetch(self, requests: Sequence[Any], global_parameters=None):
        self._prefetch = self._mboxes(requests, global_parameters)
        return self

    def notifications(self, notifications: Sequence[Dict[str, Any]]):
        self._notifications = list(notifications)
        return self

    def raw(self, document: Dict[str, Any]):
        """Caller supplied nodes, used verbatim over the defaults."""
        self._raw = dict(document or {})
        return self

    # Finalize
    def build(self) -> Dict[str, Any]:

        document: Dict[str, Any] = {}

        id_node = self._id_node()
        raw_id = self._raw.get(fields.ID)
        if isinstance(raw_id, dict):
            id_node.update(raw_id)
        if id_node:
            document[fields.ID] = id_node

        context = self._device.to_context()
        raw_context = self._raw.get(fields.CONTEXT)
        if isinstance(raw_context, dict):
            context.update(raw_context)
        document[fields.CONTEXT] = context

        experience = self._experience_cloud()
        raw_experience = self._raw.get(fields.EXPERIENCE_CLOUD)
        if isinstance(raw_experience, dict):
            experience.update(raw_experience)
        document[fields.EXPERIENCE_CLOUD] = experience

        environment_id = self._environment_id
        if environment_id == 0:
            try:
                environment_id = int(self._raw.get(fields.ENVIRONMENT_ID) or 0)
            except (TypeError, ValueError):
                environment_id = 0
        if environment_id != 0:
            document[fields.ENVIRONMENT_ID] = environment_id

        token = self._resolve_property_token()
        if token:
            document[fields.PROPERTY] = {fields.TOKEN: token}

        execute = self._execute
        if execute is None and isinstance(self._raw.get(fields.EXECUTE), dict):
            document[fields.EXECUTE] = self._raw[fields.EXECUTE]
        elif execute:
            document[fields.EXECUTE] = {fields.MBOXES: execute}

        prefetch = self._prefetch
        if prefetch is None and isinstance(self._raw.get(fields.PREFETCH), dict):
            document[fields.PREFETCH] = self._raw[fields.PREFETCH]
        elif prefetch:
            document[fields.PREFETCH] = {fields.MBOXES: prefetch}

        notifications = list(self._notifications)
        raw_notifications = self._raw.get(fields.NOTIFICATIONS)
        if isinstance(raw_notifications, list):
            notifications.extend(raw_notifications)
        if notifications:
            document[fields.NOTIFICATIONS] = notifications

        return document

    # Internals
    def _id_node(self) -> Dict[str, Any]:

        node: Dict[str, Any] = {}

        if self._tnt_id:
            node[fields.TNT_ID] = self._tnt_id
        if self._third_party_id:
            node[fields.THIRD_PARTY_ID] = self._third_party_id

        mid = self._identity.get(IDENTITY_MID)
        if mid:
            node[fields.MARKETING_CLOUD_VISITOR_ID] = str(mid)

        customer_ids = customer_ids_node(self._identity.get(IDENTITY_VISITOR_IDS))
        if customer_ids:
            node[fields.CUSTOMER_IDS] = customer_ids

        return node

    def _experience_cloud(self) -> Dict[str, Any]:

        experience: Dict[str, Any] = {
            fields.ANALYTICS: {fields.LOGGING: fields.LOGGING_CLIENT_SIDE},
        }

        audience: Dict[str, Any] = {}
        blob = self._identity.get(IDENTITY_BLOB)
        if blob:
            audience[fields.BLOB] = str(blob)
        hint = self._identity.get(IDENTITY_LOCATION_HINT)
        if hint:
            audience[fields.LOCATION_HINT] = str(hint)
        if audience:
            experience[fields.AUDIENCE_MANAGER] = audience

        return experience

    def _resolve_property_token(self) -> str:

        if self._property_token:
            return self._property_token

        for token in self._found_tokens:
            if token:
                return token

        raw_property = self._raw.get(fields.PROPERTY)
        if isinstance(raw_property, dict):
            token = raw_property.get(fields.TOKEN)
            if token:
                return str(token)

        return ""

    def _mboxes(self, requests: Sequence[Any], global_parameters) -> List[Dict[str, Any]]:

        mboxes: List[Dict[str, Any]] = []

        for index, request in enumerate(requests):
            merged = params.merge(global_parameters, request.parameters)

            mbox_parameters = merged.parameters
            token = mbox_parameters.pop(fields.AT_PROPERTY, None)
            if token:
                self._found_tokens.append(token)

            for key, value in self._lifecycle.items():
                mbox_parameters.setdefault(key, value)

            profile = merged.profile_parameters
            for key, value in self._attached_profile.items():
                profile.setdefault(key, value)

            merged = params.Parameters(mbox_parameters, profile, merged.order, merged.product)

            node: Dict[str, Any] = {
                fields.INDEX: index,
                fields.NAME: request.name,
            }
            node.update(merged.to_json())
            mboxes.append(node)

        return mboxes


def customer_ids_node(visitor_ids: Any) -> List[Dict[str, Any]]:
    """Translate visitor ids from an identity snapshot into customerIds."""

    customer_ids: List[Dict[str, Any]] = []

    if not isinstance(visitor_ids, (list, tuple)):
        return customer_ids

    for visitor in visitor_ids:
        if not isinstance(visitor, dict):
            continue

        id = visitor.get(VISITOR_ID)
        code = visitor.get(VISITOR_ID_TYPE)
        if not id or not code:
            continue

        state = _auth_states.get(visitor.get(VISITOR_AUTH_STATE), fields.UNKNOWN)
        customer_ids.append({
            fields.ID: str(id),
            fields.INTEGRATION_CODE: str(code),
            fields.AUTHENTICATED_STATE: state,
        })

    return customer_ids


def notification(type: str, name: str, tokens: Sequence[str], timestamp: int,
                 id: str, parameters=None, state: Optional[str] = None) -> Dict[str, Any]:
    """Build one entry for the notifications array."""

    mbox: Dict[str, Any] = {fields.NAME: name}
    if state:
        mbox[fields.STATE] = state

    node: Dict[str, Any] = {
        fields.ID: id,
        fields.TIMESTAMP: timestamp,
        fields.TYPE: type,
        fields.MBOX: mbox,
        fields.TOKENS: list(tokens),
    }

    if parameters is not None:
        node.update(parameters.to_json())

    return node


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:

""" Routines for picking apart a decoded delivery API response. Everything
    here is a pure function of the decoded JSON; none of it touches engine
    state.
"""

import logging

from .. import json
from . import fields


logger = logging.getLogger(__name__)


def mboxes(decoded, kind):
    """ Return the list of mbox dictionaries found under ``execute`` or
        ``prefetch`` (as selected by *kind*) in the *decoded* response.
        Entries that are not dictionaries are skipped.
    """

    try:
        container = decoded[kind]
        found = container[fields.MBOXES]
    except (KeyError, TypeError):
        return list()

    if isinstance(found, list):
        pass
    else:
        return list()

    return [mbox for mbox in found if isinstance(mbox, dict)]



def prefetched_mboxes(decoded):
    """ Return a dictionary, keyed by mbox name, of every prefetched mbox in
        the *decoded* response. Each mbox is reduced to the keys that are
        worth caching. If the same name appears more than once the last
        occurrence wins.
    """

    prefetched = dict()

    for mbox in mboxes(decoded, fields.PREFETCH):
        name = mbox.get(fields.NAME)

        if not name:
            continue

        filtered = dict()
        for key in fields.CACHED_MBOX_ACCEPTED_KEYS:
            try:
                filtered[key] = mbox[key]
            except KeyError:
                pass

        prefetched[name] = filtered

    return prefetched



def tnt_id(decoded):

    try:
        found = decoded[fields.ID][fields.TNT_ID]
    except (KeyError, TypeError):
        return None

    if found:
        return str(found)



def edge_host(decoded):

    found = decoded.get(fields.EDGE_HOST)

    if found:
        return str(found)



def index(mbox):
    """ Return the echoed index of *mbox* as an integer, or None if it is
        missing or not an integer. Indices serialized as numeric strings are
        accepted too.
    """

    found = mbox.get(fields.INDEX)

    if isinstance(found, bool) or found is None:
        return None

    try:
        return int(found)
    except (TypeError, ValueError):
        return None



def _options(mbox):

    options = mbox.get(fields.OPTIONS)

    if isinstance(options, list):
        return [option for option in options if isinstance(option, dict)]

    return list()



def content(mbox):
    """ Return the content carried by *mbox* as a string, or None if the mbox
        carries no content at all. Options without an explicit type are
        treated as html. JSON options are delivered in their serialized form.
        If there is more than one option their contents are concatenated in
        order.
    """

    pieces = list()

    for option in _options(mbox):
        try:
            value = option[fields.CONTENT]
        except KeyError:
            continue

        if value is None:
            continue

        type = option.get(fields.TYPE) or fields.TYPE_HTML

        if type == fields.TYPE_JSON and not isinstance(value, str):
            value = json.dumps_str(value)
        elif isinstance(value, str):
            pass
        else:
            logger.debug("unexpected content of type %r in mbox '%s'", type, mbox.get(fields.NAME))
            value = json.dumps_str(value)

        pieces.append(value)

    if len(pieces) == 0:
        return None

    return ''.join(pieces)



def event_tokens(mbox):
    """ Return the display event tokens from the options of *mbox*, in order.
    """

    tokens = list()

    for option in _options(mbox):
        token = option.get(fields.EVENT_TOKEN)
        if token:
            tokens.append(str(token))

    return tokens



def response_tokens(mbox):
    """ Return the response tokens of the first option that has any, or None.
    """

    for option in _options(mbox):
        tokens = option.get(fields.RESPONSE_TOKENS)
        if isinstance(tokens, dict) and tokens:
            return dict(tokens)

    return None



def click_metric(mbox):
    """ Return the first click metric of *mbox* that carries a usable event
        token, or None.
    """

    metrics = mbox.get(fields.METRICS)

    if isinstance(metrics, list):
        pass
    else:
        return None

    for metric in metrics:
        if isinstance(metric, dict):
            pass
        else:
            continue

        if metric.get(fields.TYPE) != fields.CLICK:
            continue

        token = metric.get(fields.EVENT_TOKEN)

        if token:
            return metric

    return None



def analytics_payload(node):
    """ Return the A4T analytics payload from *node*, which may be either
        an mbox or a metric; return None if there isn't one.
    """

    if node is None:
        return None

    analytics = node.get(fields.ANALYTICS)

    if isinstance(analytics, dict):
        pass
    else:
        return None

    payload = analytics.get(fields.PAYLOAD)

    if isinstance(payload, dict) and payload:
        return payload

    return None



def a4t_payload(payload, session_id):
    """ Prepare an analytics *payload* for forwarding: every key gets the
        ``&&`` prefix, and the current *session_id* is attached.
    """

    prepared = dict()

    for key, value in payload.items():
        if value is None:
            continue
        prepared[fields.A4T_PREFIX + str(key)] = str(value)

    if session_id:
        prepared[fields.A4T_SESSION_ID] = session_id

    return prepared



def content_data(mbox):
    """ Return the auxiliary data delivered alongside content: the response
        tokens, the mbox analytics payload, and the click metric analytics
        payload, each present only if the mbox carries it. Returns None if
        there is nothing to report.
    """

    data = dict()

    tokens = response_tokens(mbox)
    if tokens:
        data[fields.DATA_RESPONSE_TOKENS] = tokens

    payload = analytics_payload(mbox)
    if payload:
        data[fields.DATA_ANALYTICS_PAYLOAD] = payload

    payload = analytics_payload(click_metric(mbox))
    if payload:
        data[fields.DATA_CLICK_ANALYTICS_PAYLOAD] = payload

    if data:
        return data

    return None


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:

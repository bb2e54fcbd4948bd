"""
JSON wire encoding of interchange messages.

Every message is a single-line JSON document carrying the wire format version and its message type, byte
fields are lower-case hex strings. A message stream is the newline-separated concatenation of documents.
"""
import json
from typing import List, Iterable, Optional, Any, Dict

from zkif.config import cfg
from zkif.config_version import Versions
from zkif.errors.exceptions import EncodingError
from zkif.messages.types import Message, CircuitHeader, ConstraintsMessage, WitnessMessage, Variables, KeyValue, \
    BilinearConstraint, Term

MAX_VARIABLE_ID = (1 << 64) - 1


def _hex(data: Optional[bytes]) -> Optional[str]:
    return None if data is None else data.hex()


def _unhex(s: Optional[str], what: str) -> Optional[bytes]:
    if s is None:
        return None
    if not isinstance(s, str):
        raise EncodingError(f'Expected hex string for {what}, got {type(s).__name__}')
    try:
        return bytes.fromhex(s)
    except ValueError:
        raise EncodingError(f'Invalid hex string for {what}: "{s}"')


def _variable_id(v: Any) -> int:
    if isinstance(v, bool) or not isinstance(v, int) or not 0 <= v <= MAX_VARIABLE_ID:
        raise EncodingError(f'Invalid variable id {v!r}')
    return v


def _variables_to_json(v: Variables) -> Dict:
    return {'variable_ids': list(v.variable_ids), 'values': _hex(v.values)}


def _variables_from_json(d: Any, what: str) -> Variables:
    if not isinstance(d, dict) or not isinstance(d.get('variable_ids'), list):
        raise EncodingError(f'Malformed variables for {what}')
    ids = [_variable_id(i) for i in d['variable_ids']]
    values = _unhex(d.get('values'), what)
    if values is not None and ids and len(values) % len(ids) != 0:
        raise EncodingError(f'{len(values)} value bytes cannot be split among {len(ids)} variables ({what})')
    return Variables(ids, values)


def _lc_to_json(lc: List[Term]) -> List:
    return [[t.variable_id, t.value.hex()] for t in lc]


def _lc_from_json(lc: Any) -> List[Term]:
    if not isinstance(lc, list):
        raise EncodingError('Malformed linear combination')
    terms = []
    for t in lc:
        if not isinstance(t, list) or len(t) != 2:
            raise EncodingError(f'Malformed term {t!r}')
        terms.append(Term(_variable_id(t[0]), _unhex(t[1], 'coefficient')))
    return terms


def message_to_json(msg: Message) -> Dict:
    d = {'version': cfg.wire_format_version, 'message_type': msg.message_type}
    if isinstance(msg, CircuitHeader):
        d['free_variable_id'] = msg.free_variable_id
        d['connections'] = _variables_to_json(msg.connections)
        d['field_maximum'] = _hex(msg.field_maximum)
        if msg.configuration is None:
            d['configuration'] = None
        else:
            d['configuration'] = [{'key': kv.key, 'text': kv.text, 'data': _hex(kv.data), 'number': kv.number}
                                  for kv in msg.configuration]
    elif isinstance(msg, ConstraintsMessage):
        d['constraints'] = [{'a': _lc_to_json(c.linear_combination_a),
                             'b': _lc_to_json(c.linear_combination_b),
                             'c': _lc_to_json(c.linear_combination_c)} for c in msg.constraints]
    elif isinstance(msg, WitnessMessage):
        d['assigned_variables'] = _variables_to_json(msg.assigned_variables)
    else:
        raise ValueError(f'Cannot serialize {type(msg).__name__}')
    return d


def message_from_json(d: Any) -> Message:
    if not isinstance(d, dict):
        raise EncodingError('Message is not a JSON object')
    version = d.get('version')
    if not isinstance(version, str) or not Versions.is_compatible_wire_version(version):
        raise EncodingError(f'Unsupported wire format version {version!r} '
                            f'(supported: {Versions.WIRE_FORMAT_COMPATIBILITY.expression})')

    try:
        t = d['message_type']
        if t == CircuitHeader.message_type:
            config = d.get('configuration')
            if config is not None:
                config = [KeyValue(kv['key'], kv.get('text'), _unhex(kv.get('data'), 'configuration data'), kv.get('number', 0))
                          for kv in config]
            return CircuitHeader(_variable_id(d['free_variable_id']),
                                 _variables_from_json(d.get('connections', {'variable_ids': []}), 'connections'),
                                 _unhex(d.get('field_maximum'), 'field maximum'), config)
        elif t == ConstraintsMessage.message_type:
            return ConstraintsMessage([BilinearConstraint(_lc_from_json(c['a']), _lc_from_json(c['b']), _lc_from_json(c['c']))
                                       for c in d['constraints']])
        elif t == WitnessMessage.message_type:
            return WitnessMessage(_variables_from_json(d['assigned_variables'], 'witness'))
        else:
            raise EncodingError(f'Unknown message type {t!r}')
    except (KeyError, TypeError) as e:
        raise EncodingError(f'Malformed {d.get("message_type")} message ({e})')


def serialize(msg: Message) -> bytes:
    return json.dumps(message_to_json(msg), separators=(',', ':')).encode('utf-8')


def deserialize(data: bytes) -> Message:
    try:
        d = json.loads(data.decode('utf-8'))
    except (UnicodeDecodeError, ValueError) as e:
        raise EncodingError(f'Message is not valid JSON ({e})')
    return message_from_json(d)


def serialize_stream(msgs: Iterable[Message]) -> bytes:
    return b''.join(serialize(m) + b'\n' for m in msgs)


def deserialize_stream(data: bytes) -> List[Message]:
    return [deserialize(line) for line in data.splitlines() if line.strip()]

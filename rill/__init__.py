"""
rill - Lazy enumerations for Python

An Enum is a lazy, single-pass, clonable sequence. Anything that can produce
elements one at a time (an indexed container, an iterator, a function, a
persistent tree) becomes an Enum through a cursor, and every combinator is
again an Enum, so pipelines stay lazy until a reducer or a bridge forces them.

Submodules:
- types: Exhaustion sentinel, lifecycle enums and error types
- core: Cursor, Enum and the basic constructors
- combinators: Lazy transformations and eager reducers
- protocols: Bridge registry (enum / of_enum / backwards / of_backwards)
- bridges: Registrations for built-in containers and rill.pds
- pds: Persistent list, map, set and multimap
- channels: Buffered input/output channels with shared handles
- config: Runtime settings (buffer size, encoding, repr limit)

Importing rill registers the bridges for every built-in container.
"""

# Registers the container bridges
import rill.bridges  # noqa: F401
from rill.channels import (
    InputChannel,
    OutputChannel,
    copy,
    input_bytes,
    input_string,
    open_in,
    open_out,
    output_buffer,
    wrap_in,
    wrap_out,
)
from rill.combinators import (
    Replay,
    append,
    combine,
    compare,
    concat,
    concat_all,
    cycle,
    dedupe,
    distinct,
    drop,
    drop_while,
    equal,
    exists,
    filter,
    filter_map,
    find,
    find_map,
    flatten,
    fold,
    fold2,
    for_all,
    group,
    interleave,
    interpose,
    iter,
    iteri,
    last,
    map,
    mapcat,
    mapi,
    partition,
    reduce,
    reductions,
    replay,
    scan,
    span,
    sum_,
    take,
    take_while,
    uniq,
    window,
    zip_,
)
from rill.config import RuntimeConfig, get_config, load_config, set_config
from rill.core import (
    Cursor,
    Enum,
    clone,
    count,
    count_from,
    empty,
    fast_forward,
    from_indexed,
    from_iterable,
    init,
    irange,
    iterate,
    make,
    next_,
    nth,
    repeat,
    seq,
    singleton,
    to_list,
    unfold,
)
from rill.pds import EMPTY_LIST, Cons, MultiPMap, PMap, PSet, RefList, cons, plist
from rill.protocols import (
    backwards,
    bridge_dispatch,
    enum,
    has_bridge,
    of_backwards,
    of_enum,
    register_bridge,
    unregister_bridge,
)
from rill.types import (
    EXHAUSTED,
    ChannelClosedError,
    ChannelState,
    ClosePolicy,
    ResourceReleaseError,
    ShapeMismatchError,
)

__version__ = "0.1.0"

__all__ = [
    # Core
    "Cursor",
    "Enum",
    "EXHAUSTED",
    "make",
    "from_iterable",
    "from_indexed",
    "empty",
    "singleton",
    "init",
    "repeat",
    "count_from",
    "irange",
    "iterate",
    "unfold",
    "seq",
    "next_",
    "count",
    "clone",
    "fast_forward",
    "nth",
    "to_list",
    # Combinators
    "map",
    "mapi",
    "filter",
    "filter_map",
    "mapcat",
    "scan",
    "reductions",
    "take",
    "drop",
    "take_while",
    "drop_while",
    "span",
    "concat",
    "append",
    "flatten",
    "concat_all",
    "interleave",
    "interpose",
    "zip_",
    "combine",
    "window",
    "partition",
    "group",
    "dedupe",
    "uniq",
    "distinct",
    "cycle",
    "Replay",
    "replay",
    "fold",
    "fold2",
    "reduce",
    "iter",
    "iteri",
    "exists",
    "for_all",
    "find",
    "find_map",
    "sum_",
    "last",
    "compare",
    "equal",
    # Bridges
    "enum",
    "backwards",
    "of_enum",
    "of_backwards",
    "register_bridge",
    "unregister_bridge",
    "bridge_dispatch",
    "has_bridge",
    # Persistent structures
    "Cons",
    "EMPTY_LIST",
    "cons",
    "plist",
    "PMap",
    "PSet",
    "MultiPMap",
    "RefList",
    # Channels
    "InputChannel",
    "OutputChannel",
    "open_in",
    "open_out",
    "input_bytes",
    "input_string",
    "output_buffer",
    "wrap_in",
    "wrap_out",
    "copy",
    # Config and errors
    "RuntimeConfig",
    "load_config",
    "get_config",
    "set_config",
    "ChannelState",
    "ClosePolicy",
    "ShapeMismatchError",
    "ChannelClosedError",
    "ResourceReleaseError",
]

"""trellis type descriptors - one declaration for validation and documentation.

## Key Components

### Descriptors
- Primitives: `String`, `Integer`, `Number`, `Boolean`, `Anything`, `Nil`
- Wire-tolerant primitives: `CoercibleString`, `CoercibleInteger`,
  `CoercibleNumber`, `CoercibleBoolean`, `Date`, `DateTime`
- Wrappers: `Optional`, `Default`, `Constrained`, `Union`
- Containers: `Array`, `Hash`, `Map`
- Objects: `Struct` subclasses, referenced lazily with `Instance`

### Coercion
- `TypeConverter.coerce(descriptor, value)`

### Registry
- `TypeRegistry`, `default_registry()`

## Quick Example

```python
from trellis import types as T

class Pet(T.Struct):
    name = T.String
    age = T.in_range(T.CoercibleInteger, minimum=0).optional()

T.TypeConverter.coerce(Pet, {"name": "Rex", "age": "3"})
# Pet(name='Rex', age=3)
```
"""

from .converters import TypeConverter
from .descriptors import (
    MISSING,
    Anything,
    Array,
    Boolean,
    CoercibleBoolean,
    CoercibleInteger,
    CoercibleNumber,
    CoercibleString,
    Constrained,
    Date,
    DateTime,
    Default,
    Hash,
    Instance,
    Integer,
    Map,
    Nil,
    Number,
    Optional,
    Primitive,
    String,
    StructType,
    TypeDescriptor,
    Union,
    accepts_absence,
    as_descriptor,
    in_range,
    is_nil,
    matches,
    one_of,
    unwrap,
)
from .registry import TypeRegistry, default_registry
from .struct import Struct

__all__ = [
    "MISSING",
    "Anything",
    "Array",
    "Boolean",
    "CoercibleBoolean",
    "CoercibleInteger",
    "CoercibleNumber",
    "CoercibleString",
    "Constrained",
    "Date",
    "DateTime",
    "Default",
    "Hash",
    "Instance",
    "Integer",
    "Map",
    "Nil",
    "Number",
    "Optional",
    "Primitive",
    "String",
    "Struct",
    "StructType",
    "TypeConverter",
    "TypeDescriptor",
    "TypeRegistry",
    "Union",
    "accepts_absence",
    "as_descriptor",
    "default_registry",
    "in_range",
    "is_nil",
    "matches",
    "one_of",
    "unwrap",
]

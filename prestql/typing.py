from typing import Any, Union


# Annotation for anything `json.dumps()` can handle: request bodies, decoded responses
JSONValue = Any

# Annotation for a row sent to the gateway: a dict { column name => value }
RowDict = dict

# Annotation for values that go into a query string: rendered with str(), booleans as true/false
ClauseValue = Union[str, int, float, bool]

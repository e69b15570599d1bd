from tree_sitter import Node

from tracing_sync.core.parser import SourceFile

RECEIVER_NAME = "self"

_FIELD_NAME_TYPES = frozenset({"shorthand_field_identifier", "field_identifier", "identifier"})


def _binding_name(source: SourceFile, pattern: Node) -> str | None:
    if pattern.type == "identifier":
        return source.node_text(pattern)
    if pattern.type == "self":
        return RECEIVER_NAME
    return None


def _struct_field_names(source: SourceFile, pattern: Node) -> list[str]:
    names: list[str] = []
    for child in pattern.named_children:
        if child.type != "field_pattern":
            continue
        name = child.child_by_field_name("name")
        # Positional fields (`0: a`) have no name to skip.
        if name is not None and name.type in _FIELD_NAME_TYPES:
            names.append(source.node_text(name))
    return names


def _pattern_names(source: SourceFile, pattern: Node) -> list[str]:
    name = _binding_name(source, pattern)
    if name is not None:
        return [name]

    if pattern.type in ("mut_pattern", "ref_pattern"):
        inner = pattern.named_children[-1] if pattern.named_children else None
        inner_name = _binding_name(source, inner) if inner is not None else None
        return [inner_name] if inner_name is not None else []

    if pattern.type == "captured_pattern":
        # `name @ subpattern` binds `name`.
        binding = pattern.named_children[0] if pattern.named_children else None
        binding_name = _binding_name(source, binding) if binding is not None else None
        return [binding_name] if binding_name is not None else []

    if pattern.type == "struct_pattern":
        return _struct_field_names(source, pattern)

    return []


def excluded_argument_names(source: SourceFile, function: Node) -> list[str]:
    """Names of the arguments of ``function`` that should be kept out of the log, in declared order.

    The receiver contributes ``self``, plain bindings contribute their name and
    struct patterns contribute each named field. Tuple, slice, wildcard and
    reference patterns contribute nothing. Duplicates are kept.
    """
    parameters = function.child_by_field_name("parameters")
    if parameters is None:
        return []

    names: list[str] = []
    for parameter in parameters.named_children:
        if parameter.type == "self_parameter":
            names.append(RECEIVER_NAME)
        elif parameter.type == "parameter":
            pattern = parameter.child_by_field_name("pattern")
            if pattern is not None:
                names.extend(_pattern_names(source, pattern))
    return names

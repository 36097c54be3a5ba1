def is_rpc_route_pattern(route: str) -> bool:
    """
    Does a route look like an RPC path (/package.Service/Method)?

    Routes such as /oteldemo.CartService/AddItem carry a dot in their first
    segment. Plain HTTP routes (/api/v1/orders) do not.

    This is the default predicate used by the resource topology cache to
    decide which caller/callee pairs only talk over a persistent RPC channel.
    Pass a different predicate to SystemCache to change the policy.

    :param route: The route of an observed endpoint.
    :type route: str
    :return: bool
    """
    if not route or len(route) < 3:
        return False
    if route[0] != '/':
        return False
    first_segment = route[1:].split('/', 1)[0]
    return '.' in first_segment

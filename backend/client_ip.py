from fastapi import Header, Request


async def get_client_ip(
    request: Request,
    x_forwarded_for: str | None = Header(default=None),
) -> str | None:
    if x_forwarded_for:
        first_hop = x_forwarded_for.split(",", 1)[0].strip()
        if first_hop:
            return first_hop
    if request.client:
        return request.client.host
    return None

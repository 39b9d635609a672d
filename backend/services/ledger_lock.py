import asyncio

# Single writer for the ledger, the stock counter and the order id sequence.
# Only storage calls may run while it is held; never courier or classifier I/O.
ledger_lock = asyncio.Lock()

#!/usr/bin/env python3
# Example usage of embedded_json_docstore
# Collections live in ./demo_db/<name>.json as JSON arrays.

import asyncio
from embedded_json_docstore import Database
from rich.console import Console

_console = Console()

def progress_printer(evt):
    phase = evt.get("phase", "")
    pct = int(evt.get("pct", 0))
    msg = evt.get("msg", "")
    line = f"[progress] {phase} {pct}%"
    if msg:
        line += f" - {msg}"
    _console.print(line, markup=False, highlight=False)

async def main() -> None:
    # Opening creates the root directory if needed
    db = Database("demo_db", on_progress=progress_printer)

    user = {"id": 1, "name": "Alice", "email": "alice@example.com", "active": True}
    res = await db.insert("users", user)
    _console.print("Insert:", res.message, "->", user["_id"])

    # Equality filter, AND over all keys
    res = await db.find("users", {"name": "Alice", "active": True})
    _console.print("Found:", res.message)

    # Positions in the collection, as {index: document}
    res = await db.find("users", {"id": 1}, want_indices=True)
    _console.print("Indexed:", res.message)

    update = db.update_signature()
    update["$find"]["name"] = "Alice"
    update["$set"]["active"] = False
    res = await db.update("users", update)
    _console.print("Update:", res.message)

    res = await db.delete("users", {"id": 1})
    _console.print("Delete:", res.message)

    res = await db.find("users")
    _console.print("Remaining:", res.message)

    res = await db.remove_database()
    _console.print("Teardown:", res.message)

if __name__ == "__main__":
    asyncio.run(main())

"""Example: protect a form submission with a single-use nonce."""

from __future__ import annotations

import asyncio

from stateless_nonce import NonceConfig, NonceManager, nonce_field
from stateless_nonce.ledger import SingleUseNonceGuard, create_ledger_from_env


async def main() -> None:
    manager = NonceManager(NonceConfig.from_env())
    guard = SingleUseNonceGuard(manager=manager, ledger=create_ledger_from_env())

    token = manager.create("edit_post", 42, 7, salt="post-form")
    print(nonce_field("_nonce", token))

    print("stateless:", manager.validate(token, "edit_post", 42, 7, salt="post-form"))
    print("wrong user:", manager.validate(token, "edit_post", 43, 7, salt="post-form"))

    first = await guard.redeem(token, "edit_post", 42, 7, salt="post-form")
    second = await guard.redeem(token, "edit_post", 42, 7, salt="post-form")
    print("first submit:", first.reason)
    print("second submit:", second.reason)

    await guard.ledger.close()


if __name__ == "__main__":
    asyncio.run(main())

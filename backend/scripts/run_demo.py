"""
End-to-end demo against a running server (DEMO_MODE=true).

Walks the token lifecycle through the HTTP API:
  1. Administrator mints a token to holder 1
  2. Transfer attempt while transfers are closed by policy
  3. Administrator opens transfers, then locks them
  4. Unlock and transfer holder 1 -> holder 2
  5. Holder 2 burns the token; a second burn is rejected
  6. Print the audit log

Run scripts/generate_accounts.py first and start the server with
ADMINISTRATOR_WALLET set to the generated administrator address.
"""
import json
import os
import sys

import httpx

BASE = os.environ.get("REGISTRY_URL", "http://localhost:8000")

with open(os.path.join(os.path.dirname(__file__), "demo_accounts.json")) as f:
    accounts = json.load(f)

ADMIN = accounts["administrator"]["address"]
HOLDER1 = accounts["holder1"]["address"]
HOLDER2 = accounts["holder2"]["address"]


def section(title):
    print()
    print("=" * 60)
    print(f"  {title}")
    print("=" * 60)


def call(client, method, path, wallet=None, body=None, expect=200):
    headers = {"X-Wallet-Address": wallet} if wallet else {}
    r = client.request(method, f"{BASE}{path}", headers=headers, json=body)
    mark = "OK " if r.status_code == expect else "!! "
    print(f"{mark}{method} {path} -> {r.status_code}")
    if r.status_code != expect:
        print(f"   {r.text}")
    return r.json()


def main():
    with httpx.Client(timeout=10) as client:
        section("Registry status")
        status = call(client, "GET", "/admin/status")
        print(f"   gate: {status['data']['gateState']}, next id: {status['data']['nextId']}")
        if status["data"]["administrator"] != ADMIN:
            print("   Server administrator differs from demo_accounts.json; aborting.")
            sys.exit(1)

        section("1. Mint to holder 1")
        minted = call(client, "POST", "/tokens/mint", ADMIN, {"recipient": HOLDER1}, expect=201)
        token_id = minted["data"]["tokenId"]
        print(f"   token id: {token_id}")

        section("2. Transfer while closed by policy")
        call(client, "POST", f"/tokens/{token_id}/transfer", HOLDER1,
             {"from": HOLDER1, "to": HOLDER2}, expect=403)

        section("3. Open transfers, then lock")
        call(client, "PUT", "/admin/transferable", ADMIN, {"transferable": True})
        call(client, "POST", "/admin/lock", ADMIN)
        call(client, "POST", f"/tokens/{token_id}/transfer", HOLDER1,
             {"from": HOLDER1, "to": HOLDER2}, expect=403)

        section("4. Unlock and transfer")
        call(client, "POST", "/admin/unlock", ADMIN)
        call(client, "POST", f"/tokens/{token_id}/transfer", HOLDER1,
             {"from": HOLDER1, "to": HOLDER2})

        section("5. Burn twice")
        call(client, "POST", f"/tokens/{token_id}/burn", HOLDER2)
        call(client, "POST", f"/tokens/{token_id}/burn", HOLDER2, expect=409)

        section("6. Audit log")
        log = call(client, "GET", f"/events?tokenId={token_id}")
        for event in log["data"]:
            print(f"   #{event['sequence']:>4} {event['eventType']:<10} {event['payload']}")


if __name__ == "__main__":
    main()

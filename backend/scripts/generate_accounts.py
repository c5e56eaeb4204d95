"""Generate an administrator and two holder wallets for local demos."""
from algosdk import account, mnemonic
import json
import os

accounts = {}
for role in ["administrator", "holder1", "holder2"]:
    pk, addr = account.generate_account()
    accounts[role] = {"address": addr, "mnemonic": mnemonic.from_private_key(pk)}

out_path = os.path.join(os.path.dirname(__file__), "demo_accounts.json")
with open(out_path, "w") as f:
    json.dump(accounts, f, indent=2)

print(f"Accounts saved to: {out_path}")
for role, info in accounts.items():
    print(f"\n{role.upper()}:")
    print(f"  {info['address']}")

print("\nAdd to .env:")
print(f"  ADMINISTRATOR_WALLET={accounts['administrator']['address']}")

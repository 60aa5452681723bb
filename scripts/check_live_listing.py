#!/usr/bin/env python3
"""Quick live check of credentials + listing against the Calendafy CRM API.

Reads CALENDAFY_* environment variables.

Run:
  poetry run python scripts/check_live_listing.py            # contacts, default view
  poetry run python scripts/check_live_listing.py deal       # deals
  poetry run python scripts/check_live_listing.py task all   # every open task page
"""

import sys

from calendafy_crm import CalendafyClient, CalendafyCredentials, OperationDispatcher


def main() -> None:
    resource = sys.argv[1] if len(sys.argv) > 1 else "contact"
    return_all = len(sys.argv) > 2 and sys.argv[2] == "all"

    credentials = CalendafyCredentials.from_env()
    print(f"Listing {resource} from {credentials.resolved_base_url}...")

    with CalendafyClient(credentials) as client:
        batch = OperationDispatcher(client).run(
            [{"returnAll": return_all, "limit": 5}],
            resource,
            "getAll",
            continue_on_fail=True,
        )

    result = batch.results[0]
    if not result.ok:
        print(f"\n⚠️ Listing failed: {result.error.message}")
        return
    print(f"Got {len(result.data)} records")
    for i, record in enumerate(result.data[:5], 1):
        label = record.get("name") or record.get("display_name") or record.get("title") or "N/A"
        print(f"  {i}. {label} (id={record.get('id', 'N/A')})")
    print("\n✅ Credentials + listing flow succeeded.")


if __name__ == "__main__":
    main()

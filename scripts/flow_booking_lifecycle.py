#!/usr/bin/env python3
"""
Booking lifecycle flow script.

DO NOT ADD BUSINESS LOGIC HERE.
This script only orchestrates API calls.
All rules live in the backend.

Usage:
    python scripts/flow_booking_lifecycle.py --property-id <UUID> --customer-id <UUID> --price 3000000000
    python scripts/flow_booking_lifecycle.py --property-id <UUID> --customer-id <UUID> --price 3000000000 --cancel

Flow (default):
    1. Login as admin
    2. Create booking
    3. Approve booking
    4. Record deposit
    5. Sign contract
    6. Record remaining payment
    7. Complete booking
    8. Payment summary

Flow (--cancel):
    1-4 as above, then cancel the booking and refund the deposit.
"""

import argparse
import json
import sys

import httpx

BASE_URL = "http://localhost:8000"

ADMIN_EMAIL = "admin@joyhomes.vn"
ADMIN_PASSWORD = "Admin@123"


def login(email: str, password: str) -> str:
    """Login and return token."""
    response = httpx.post(
        f"{BASE_URL}/api/auth/login",
        json={"email": email, "password": password},
        timeout=10.0,
    )
    if response.status_code != 200:
        print(f"ERROR: Login failed for {email}: {response.status_code}")
        print(response.text)
        sys.exit(1)
    return response.json()["accessToken"]


def api_request(token: str, method: str, endpoint: str, data: dict | None = None) -> dict:
    """Make authenticated API request."""
    response = httpx.request(
        method,
        f"{BASE_URL}{endpoint}",
        headers={"Authorization": f"Bearer {token}"},
        json=data,
        timeout=10.0,
    )
    return {"status": response.status_code, "data": response.json() if response.text else {}}


def patch_booking(token: str, booking_id: str, action: str, **fields) -> dict:
    return api_request(token, "PATCH", f"/api/bookings/{booking_id}", {"action": action, **fields})


def print_step(step: int, title: str):
    print(f"\n{'='*60}")
    print(f"STEP {step}: {title}")
    print("=" * 60)


def check(result: dict, fields: list[str] | None = None) -> dict:
    """Print the result and stop on error."""
    if result["status"] >= 400:
        print(f"ERROR ({result['status']}): {json.dumps(result['data'], indent=2, ensure_ascii=False)}")
        sys.exit(1)

    print(f"Status: {result['status']}")
    data = result["data"]
    if fields:
        data = {k: data.get(k) for k in fields}
    print(json.dumps(data, indent=2, ensure_ascii=False))
    return result["data"]


def main():
    parser = argparse.ArgumentParser(description="Booking lifecycle flow")
    parser.add_argument("--property-id", required=True, help="Property UUID")
    parser.add_argument("--customer-id", required=True, help="Customer UUID")
    parser.add_argument("--price", type=int, required=True, help="Agreed price (VND)")
    parser.add_argument("--deposit", type=int, help="Deposit amount (VND), default 10%% of price")
    parser.add_argument("--contract-number", default="HD-001")
    parser.add_argument("--cancel", action="store_true", help="Cancel and refund after deposit")
    parser.add_argument("--cancel-reason", default="Khách đổi ý")
    args = parser.parse_args()

    deposit = args.deposit or args.price // 10

    print_step(1, "Login as admin")
    token = login(ADMIN_EMAIL, ADMIN_PASSWORD)
    print(f"Logged in as {ADMIN_EMAIL}")

    print_step(2, "Create booking")
    booking = check(
        api_request(token, "POST", "/api/bookings", {
            "propertyId": args.property_id,
            "customerId": args.customer_id,
            "agreedPrice": args.price,
        }),
        ["id", "code", "agreedPrice", "commissionRate", "commissionAmount", "status"],
    )
    booking_id = booking["id"]

    print_step(3, "Approve booking")
    check(patch_booking(token, booking_id, "approve"), ["code", "status"])

    print_step(4, "Record deposit")
    check(
        patch_booking(token, booking_id, "add_deposit", amount=deposit, paymentMethod="BANK_TRANSFER"),
        ["code", "type", "amount", "status"],
    )

    if args.cancel:
        print_step(5, "Cancel booking")
        check(patch_booking(token, booking_id, "cancel", reason=args.cancel_reason), ["code", "status", "notes"])

        print_step(6, "Refund deposit")
        check(patch_booking(token, booking_id, "add_refund", amount=deposit), ["code", "type", "amount"])

        print_step(7, "Payment summary")
        check(patch_booking(token, booking_id, "payment_summary"))
        print("\nCANCEL & REFUND FLOW COMPLETE")
        return

    print_step(5, "Sign contract")
    check(
        patch_booking(token, booking_id, "update_status", status="CONTRACTED", contractNumber=args.contract_number),
        ["code", "status", "contractNumber", "contractDate"],
    )

    print_step(6, "Record remaining payment")
    check(
        patch_booking(token, booking_id, "add_payment", amount=args.price - deposit, paymentMethod="BANK_TRANSFER"),
        ["code", "type", "amount"],
    )

    print_step(7, "Complete booking")
    check(patch_booking(token, booking_id, "update_status", status="COMPLETED"), ["code", "status"])

    print_step(8, "Payment summary")
    check(patch_booking(token, booking_id, "payment_summary"))
    print("\nFULL FLOW COMPLETE")


if __name__ == "__main__":
    main()

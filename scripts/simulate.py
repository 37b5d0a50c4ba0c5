"""
End-to-End Simulation Script

Drives a running server through the whole customer/admin flow, then fires
a burst of concurrent orders to exercise the connection pool.

Requires an admin account (see scripts/init_db.py).
Run from project root:
    python scripts/simulate.py --admin-username admin --admin-password secret

Author: Khalil_Bannouri
Version: 1.0.0
"""

import asyncio
import sys
import os
import random
import time
import uuid
import argparse
from datetime import datetime
from typing import Any

import httpx

# Windows event loop fix
if sys.platform == "win32":
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

# Configuration
API_BASE_URL = os.getenv("API_BASE_URL", "http://localhost:5000")
TOTAL_ORDERS = 50

MENU_ITEMS = [
    {"name": "Pizza Margherita", "price": "14.99", "category": "Pizza"},
    {"name": "Pepperoni Pizza", "price": "16.99", "category": "Pizza"},
    {"name": "Caesar Salad", "price": "8.99", "category": "Salads"},
    {"name": "Garlic Bread", "price": "5.99", "category": "Sides"},
    {"name": "Tiramisu", "price": "7.99", "category": "Desserts"},
]


def auth_headers(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def random_cart(menu: list[dict]) -> dict[str, Any]:
    """Build a cart payload from the live menu."""
    lines = []
    for item in random.sample(menu, k=random.randint(1, min(3, len(menu)))):
        lines.append({"id": item["id"], "quantity": random.randint(1, 3), "price": item["price"]})
    total = round(sum(line["quantity"] * line["price"] for line in lines), 2)
    return {"items": lines, "total_amount": total}


async def login(client: httpx.AsyncClient, username: str, password: str) -> str:
    response = await client.post(
        f"{API_BASE_URL}/api/auth/login",
        json={"username": username, "password": password},
    )
    response.raise_for_status()
    return response.json()["token"]


async def ensure_menu(client: httpx.AsyncClient, admin_token: str) -> list[dict]:
    """Return the menu, creating sample items if it is empty."""
    response = await client.get(f"{API_BASE_URL}/api/menu")
    items = response.json()["items"]
    if items:
        return items

    for item in MENU_ITEMS:
        await client.post(
            f"{API_BASE_URL}/api/admin/menu",
            data=item,
            headers=auth_headers(admin_token),
        )
    response = await client.get(f"{API_BASE_URL}/api/menu")
    return response.json()["items"]


async def send_order(
    client: httpx.AsyncClient,
    token: str,
    menu: list[dict],
    order_num: int,
) -> dict[str, Any]:
    """Place one order and time it."""
    payload = random_cart(menu)
    start_time = time.time()

    try:
        response = await client.post(
            f"{API_BASE_URL}/api/orders",
            json=payload,
            headers=auth_headers(token),
            timeout=30.0,
        )
        elapsed = round(time.time() - start_time, 3)

        if response.status_code == 200:
            return {
                "order_num": order_num,
                "success": True,
                "order_id": response.json().get("orderId"),
                "total": payload["total_amount"],
                "time": elapsed,
            }
        return {
            "order_num": order_num,
            "success": False,
            "error": response.text[:100],
            "time": elapsed,
        }
    except httpx.HTTPError as e:
        elapsed = round(time.time() - start_time, 3)
        return {
            "order_num": order_num,
            "success": False,
            "error": str(e)[:100],
            "time": elapsed,
        }


async def test_single_flow(admin_username: str, admin_password: str) -> dict[str, Any]:
    """Register → order → admin confirms → customer sees the new status."""
    print("\n" + "=" * 70)
    print("🧪 END-TO-END FLOW")
    print("=" * 70)

    suffix = uuid.uuid4().hex[:8]
    customer = {
        "username": f"sim_{suffix}",
        "email": f"sim_{suffix}@example.com",
        "password": "simulation-pw",
        "full_name": "Simulation Customer",
        "phone": "555-000-0000",
    }

    async with httpx.AsyncClient() as client:
        print("\n1️⃣ Health Check...")
        response = await client.get(f"{API_BASE_URL}/health")
        print(f"   Status: {response.json().get('status')}")

        print("\n2️⃣ Admin login...")
        admin_token = await login(client, admin_username, admin_password)
        menu = await ensure_menu(client, admin_token)
        print(f"   ✅ {len(menu)} menu items available")

        print("\n3️⃣ Register + login customer...")
        response = await client.post(f"{API_BASE_URL}/api/auth/register", json=customer)
        response.raise_for_status()
        token = await login(client, customer["username"], customer["password"])
        print(f"   ✅ {customer['username']} logged in")

        print("\n4️⃣ Place order...")
        result = await send_order(client, token, menu, 0)
        if not result["success"]:
            print(f"   ❌ Failed: {result['error']}")
            return {"success": False}
        order_id = result["order_id"]
        print(f"   ✅ Order #{order_id} placed (${result['total']})")

        print("\n5️⃣ Admin confirms order...")
        response = await client.put(
            f"{API_BASE_URL}/api/admin/orders/{order_id}/status",
            json={"status": "confirmed"},
            headers=auth_headers(admin_token),
        )
        response.raise_for_status()

        print("\n6️⃣ Customer polls status...")
        response = await client.get(
            f"{API_BASE_URL}/api/orders/{order_id}",
            headers=auth_headers(token),
        )
        status = response.json()["order"]["status"]
        print(f"   {'✅' if status == 'confirmed' else '❌'} Status: {status}")

    return {"success": status == "confirmed", "token": token, "menu": menu}


async def run_simulation(token: str, menu: list[dict], num_orders: int = TOTAL_ORDERS) -> dict[str, Any]:
    """Fire ``num_orders`` concurrent orders for one customer."""
    print("=" * 70)
    print("🔥 CONCURRENT ORDER BURST")
    print("=" * 70)
    print(f"📋 Total Orders: {num_orders}")
    print(f"🎯 Target: {API_BASE_URL}")
    print(f"⏰ Started: {datetime.now().strftime('%H:%M:%S')}")

    start_time = time.time()
    async with httpx.AsyncClient() as client:
        tasks = [send_order(client, token, menu, i + 1) for i in range(num_orders)]
        results = await asyncio.gather(*tasks)
    total_time = round(time.time() - start_time, 2)

    successful = [r for r in results if r["success"]]
    failed = [r for r in results if not r["success"]]

    print(f"\n✅ Successful Orders: {len(successful)}/{num_orders}")
    print(f"❌ Failed Orders: {len(failed)}/{num_orders}")
    print(f"⏱️  Total Time: {total_time}s")

    if successful:
        avg_time = round(sum(r["time"] for r in successful) / len(successful), 3)
        print(f"   Average Response: {avg_time}s")

    if failed:
        print("\n⚠️  Failed Order Details (showing first 5):")
        for f in failed[:5]:
            print(f"   Order #{f['order_num']}: {f.get('error', 'Unknown error')}")

    return {
        "total": num_orders,
        "successful": len(successful),
        "failed": len(failed),
        "total_time": total_time,
    }


async def main(args: argparse.Namespace) -> int:
    flow = await test_single_flow(args.admin_username, args.admin_password)
    if not flow["success"]:
        print("\n❌ End-to-end flow failed.")
        return 1
    if args.orders > 0:
        await run_simulation(flow["token"], flow["menu"], args.orders)
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="End-to-end simulation")
    parser.add_argument("--admin-username", required=True, help="Existing admin account")
    parser.add_argument("--admin-password", required=True, help="Admin password")
    parser.add_argument("--orders", type=int, default=TOTAL_ORDERS, help="Number of burst orders (0 to skip)")
    args = parser.parse_args()

    sys.exit(asyncio.run(main(args)))

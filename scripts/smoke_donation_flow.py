from donation_app.main import create_app
from fastapi.testclient import TestClient
from donation_app.core.config import Settings
import tempfile
import os
import json


def run():
    with tempfile.TemporaryDirectory() as d:
        db_path = os.path.join(d, "smoke.db")
        settings = Settings(db_path=db_path)
        app = create_app(settings_override=settings)
        client = TestClient(app)

        results = {}
        results["categories"] = client.get("/categories").json()
        results["courier_charges"] = client.get("/courier-charges").json()
        draft = {
            "donor_id": "smoke-donor",
            "items": [{"category_id": "1", "quantity": 2}],
            "fulfillment": "courier",
            "courier_address": "123 MG Road, Gaya, Bihar, India",
        }
        results["quote"] = client.post("/donations/quote", json=draft).json()
        blocked = client.post(
            "/donations/orders", json={**draft, "courier_address": ""}
        )
        results["blocked_status"] = blocked.status_code
        results["blocked_body"] = blocked.json()
        order = client.post("/donations/orders", json={**draft, "method": "Cash"})
        results["order_status"] = order.status_code
        results["order"] = order.json()
        results["donation"] = client.get(
            f"/donations/{order.json()['donation_id']}"
        ).json()
        print(json.dumps(results, indent=2))


if __name__ == "__main__":
    run()

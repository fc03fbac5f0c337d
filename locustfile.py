from locust import HttpUser, task, between
from datetime import date, timedelta
import os
import json
import random


class BackOfficeUser(HttpUser):
    """Locust user that logs in via JWT and exercises the spend ledger."""

    wait_time = between(0.5, 2.5)

    def on_start(self):
        self.headers = {"Content-Type": "application/json"}
        self.campaign_ids = []

        login_payload = json.dumps({
            "email": os.getenv("LOCUST_EMAIL", "admin@backoffice.agency"),
            "password": os.getenv("LOCUST_PASSWORD", "testpass123"),
        })
        with self.client.post(
            "/api/auth/login/",
            data=login_payload,
            headers=self.headers,
            catch_response=True,
        ) as resp:
            token = resp.json().get("access") if resp.status_code == 200 else None
            if not token:
                resp.failure(f"Login failed: {resp.status_code}")
                return
            self.headers["Authorization"] = f"Bearer {token}"
            resp.success()

        resp = self.client.get("/api/campaigns/", headers=self.headers)
        if resp.status_code == 200:
            self.campaign_ids = [c["id"] for c in resp.json()]

    def _campaign_id(self):
        return random.choice(self.campaign_ids) if self.campaign_ids else None

    @task(3)
    def list_campaigns(self):
        self.client.get("/api/campaigns/", headers=self.headers)

    @task(3)
    def record_daily_spend(self):
        campaign_id = self._campaign_id()
        if campaign_id is None:
            return
        day = date.today() - timedelta(days=random.randint(0, 4))
        self.client.post(
            f"/api/campaigns/{campaign_id}/daily-spends/",
            data=json.dumps({"date": day.isoformat(), "amount": f"{random.uniform(0, 500):.2f}"}),
            headers=self.headers,
            name="/api/campaigns/[id]/daily-spends/",
        )

    @task(2)
    def calendar(self):
        campaign_id = self._campaign_id()
        if campaign_id is None:
            return
        self.client.get(
            f"/api/campaigns/{campaign_id}/calendar/",
            headers=self.headers,
            name="/api/campaigns/[id]/calendar/",
        )

    @task(2)
    def analytics_rollup(self):
        self.client.get("/api/campaigns/analytics", headers=self.headers)

    @task(1)
    def analytics_last_month(self):
        end = date.today()
        start = end - timedelta(days=30)
        self.client.get(
            f"/api/campaigns/analytics?startDate={start.isoformat()}&endDate={end.isoformat()}",
            headers=self.headers,
            name="/api/campaigns/analytics?range",
        )


# Useful for headless CSV output: `locust --headless -u 50 -r 5 -t 2m -f locustfile.py --csv out --host http://localhost:8070`

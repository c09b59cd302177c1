# scripts/bootstrap.py
"""Create the schema, reference data and a demo client with an API key.

Prints the raw key once; it is not recoverable afterwards.
"""
import os

from b2b_gateway.db import SessionLocal
from b2b_gateway.db_init import init_schema_and_seed
from b2b_gateway.endpoints import Endpoint
from b2b_gateway.models import ApiKey, Client
from b2b_gateway.services.credits import credit
from b2b_gateway.utils.crypto import generate_api_key, hash_token, key_prefix

COMPANY = os.getenv("BOOTSTRAP_COMPANY", "Demo Realty")
CREDITS = int(os.getenv("BOOTSTRAP_CREDITS", "500"))


def run():
    # 1) create schema + packages/insights
    init_schema_and_seed(seed=True)

    # 2) demo client + key if missing
    with SessionLocal() as s:
        client = s.query(Client).filter_by(company_name=COMPANY).one_or_none()
        if not client:
            client = Client(company_name=COMPANY, tier="professional")
            s.add(client)
            s.flush()
            credit(s, client, CREDITS, description="Bootstrap balance")

        raw_key = generate_api_key()
        s.add(ApiKey(
            client_id=client.id,
            name="bootstrap",
            key_prefix=key_prefix(raw_key),
            key_hash=hash_token(raw_key),
            allowed_endpoints=[e.value for e in Endpoint if e is not Endpoint.INFO],
        ))
        s.commit()
        print(f"client_id={client.id}")
        print(f"api_key={raw_key}")


if __name__ == "__main__":
    run()

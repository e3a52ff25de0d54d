#!/usr/bin/env python3
"""
Contact Intelligence - Main Demo

Runs the collection pipeline for a single contact using API keys from the
environment:

1. Optionally syncs contacts from AmoCRM (AMOCRM_API_KEY, AMOCRM_SUBDOMAIN)
2. Collects company and contact data (BRAVE_API_KEY, PERPLEXITY_API_KEY)
3. Generates recommendations (OPENAI_API_KEY)
"""

import argparse
import logging
import os

from contact_intel.config import get_settings
from contact_intel.core.entities import Contact
from contact_intel.core.errors import ContactIntelError
from contact_intel.core.stores import (
    Credentials,
    InMemoryContactRepository,
    InMemoryCredentialStore,
    InMemoryPreferenceStore,
    Preferences
)
from contact_intel.layers.crm import AmoCRMDirectory, ContactSyncService
from contact_intel.use_cases import CollectDataUseCase, RecommendationGenerator

DEMO_USER = "demo-user"


def parse_args():
    parser = argparse.ArgumentParser(description="Collect intelligence for a sales contact")
    parser.add_argument("--name", default="Аркадий Волож", help="Contact name")
    parser.add_argument("--company", default="Яндекс", help="Company name")
    parser.add_argument(
        "--search",
        nargs="+",
        default=None,
        choices=["brave", "perplexity"],
        help="Search systems to use"
    )
    parser.add_argument("--sync", action="store_true", help="Sync contacts from AmoCRM first")
    parser.add_argument(
        "--no-recommendations",
        action="store_true",
        help="Skip recommendation generation"
    )
    return parser.parse_args()


def print_collected(contact: Contact):
    data = contact.collected_data
    print()
    print("=" * 60)
    print(f"{get_settings().app_name.upper()}: {contact.name} ({contact.company or 'компания не указана'})")
    print("=" * 60)

    rows = [
        ("Industry", data.industry),
        ("Revenue", data.revenue),
        ("Employees", data.employees),
        ("Products", data.products),
        ("Job title", data.job_title),
    ]
    for label, value in rows:
        print(f"  {label:<12} {value or '-'}")

    for post in data.social_posts or []:
        print(f"  [{post.platform} {post.date}] {post.content[:80]}")

    if data.company_summary:
        print()
        print("Company summary:")
        print(f"  {data.company_summary}")
    if data.contact_summary:
        print()
        print("Contact summary:")
        print(f"  {data.contact_summary}")

    print()
    print("Search audit trail:")
    for record in data.search_queries:
        mark = "x" if record.succeeded else " "
        print(f"  [{mark}] {record.service.label:<13} {record.query}")


def print_recommendations(recommendations: list):
    print()
    print("=" * 60)
    print("RECOMMENDATIONS")
    print("=" * 60)
    for index, rec in enumerate(recommendations, 1):
        print(f"{index}. {rec.title}")
        print(f"   {rec.description}")
        print(f"   Почему: {rec.rationale}")
        print(f"   Выгода: {rec.benefits}")


def main():
    args = parse_args()
    settings = get_settings()
    level = "DEBUG" if settings.debug else settings.log_level.upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )

    credentials = Credentials(
        brave_api_key=os.getenv("BRAVE_API_KEY"),
        perplexity_api_key=os.getenv("PERPLEXITY_API_KEY"),
        openai_api_key=os.getenv("OPENAI_API_KEY"),
        amocrm_api_key=os.getenv("AMOCRM_API_KEY"),
        amocrm_subdomain=os.getenv("AMOCRM_SUBDOMAIN")
    )
    credential_store = InMemoryCredentialStore({DEMO_USER: credentials})
    preference_store = InMemoryPreferenceStore({
        DEMO_USER: Preferences(search_systems=args.search or list(settings.default_search_systems))
    })
    repository = InMemoryContactRepository()

    contact = repository.upsert_contact(
        Contact(user_id=DEMO_USER, crm_id="demo", name=args.name, company=args.company)
    )

    collector = CollectDataUseCase(
        repository,
        credential_store,
        preference_store,
        crm_directory=AmoCRMDirectory(credential_store, settings.crm),
        settings=settings
    )

    try:
        if args.sync:
            synced = ContactSyncService(repository, credential_store, settings.crm).sync(DEMO_USER)
            print(f"Synced {len(synced)} contacts from AmoCRM")

        contact = collector.collect_data(contact.id, DEMO_USER)
        print_collected(contact)

        if not args.no_recommendations and credentials.openai_api_key:
            generator = RecommendationGenerator(
                repository, credential_store, preference_store, settings=settings
            )
            print_recommendations(generator.generate(contact.id, DEMO_USER))
    except ContactIntelError as e:
        print(f"Error: {e}")
        return 1

    return 0


if __name__ == "__main__":
    raise SystemExit(main())

"""Maintenance command line for the offer catalog.

Usage:
  offer-catalog seed [--email EMAIL] [--password PASSWORD] [--no-samples]
  offer-catalog create-admin --email EMAIL --password PASSWORD --name NAME
  offer-catalog stats
  offer-catalog clear --yes
  offer-catalog publish --title ... --image photo.jpg
"""

import argparse
import asyncio
import mimetypes
from datetime import UTC, datetime, timedelta
from pathlib import Path

from offer_catalog.adapters.httpx_blob_uploader import HttpxBlobUploader
from offer_catalog.app_logging import configure_logging
from offer_catalog.containers import AppContainer, build_container
from offer_catalog.domain.errors import OfferCatalogError
from offer_catalog.domain.offers import Offer, OfferDraft
from offer_catalog.domain.uploads import UploadGrant

BANNER = "Offer Catalog maintenance"
DEFAULT_ADMIN_EMAIL = "admin@offers-system.com"
DEFAULT_ADMIN_PASSWORD = "admin123"
DEFAULT_ADMIN_NAME = "System Administrator"


def sample_offers(now: datetime) -> list[OfferDraft]:
    """Return the demo offers created by ``seed``."""
    return [
        OfferDraft(
            title="Summer Sale - 50% Off Electronics",
            description=(
                "Get amazing discounts on all electronic items including "
                "smartphones, laptops, and accessories. Limited time offer!"
            ),
            original_price=999.99,
            discounted_price=499.99,
            valid_from=now,
            valid_until=now + timedelta(days=30),
        ),
        OfferDraft(
            title="Buy One Get One Free - Fashion Items",
            description=(
                "Purchase any fashion item and get another one absolutely free. "
                "Mix and match from our entire collection."
            ),
            original_price=79.99,
            discounted_price=39.99,
            valid_from=now,
            valid_until=now + timedelta(days=14),
        ),
        OfferDraft(
            title="Weekend Special - Home & Garden",
            description=(
                "Transform your living space with our weekend special on home "
                "and garden items. Free delivery included!"
            ),
            original_price=299.99,
            discounted_price=199.99,
            valid_from=now,
            valid_until=now + timedelta(days=7),
        ),
    ]


async def seed(
    container: AppContainer,
    email: str,
    password: str,
    name: str,
    with_samples: bool = True,
) -> list[Offer]:
    """Create the first administrator and demo offers when missing."""
    created = container.credential_service.ensure_admin(email, name, password)
    if created is None:
        print("Admin user already exists")
    else:
        print(f"Admin user created: {created.email}")
        if password == DEFAULT_ADMIN_PASSWORD:
            print("WARNING: change the default password after first login.")

    offers: list[Offer] = []
    if with_samples:
        if await container.offer_service.list_all():
            print("Sample offers already exist")
        else:
            now = container.offer_service.clock()
            for draft in sample_offers(now):
                offers.append(await container.offer_service.create(draft))
            print(f"Created {len(offers)} sample offers")
    await print_stats(container)
    return offers


async def print_stats(container: AppContainer) -> None:
    """Print administrator and offer counts."""
    stats = await container.offer_service.catalog_stats()
    print(f"- Admins: {container.credential_service.count_admins()}")
    print(f"- Total offers: {stats.total}")
    print(f"- Active offers: {stats.active}")
    print(f"- Hidden offers: {stats.hidden}")
    print(f"- Scheduled offers: {stats.scheduled}")
    print(f"- Expired offers: {stats.expired}")


async def clear(container: AppContainer) -> None:
    """Delete all offers and administrators."""
    removed_offers = await container.offer_service.clear()
    removed_admins = container.credential_service.clear()
    print(f"Deleted {removed_offers} offers and {removed_admins} administrators")


async def publish(
    container: AppContainer,
    draft: OfferDraft,
    image_path: Path | None,
    uploader: HttpxBlobUploader | None = None,
) -> Offer:
    """Create an offer, uploading a local image through an upload grant."""
    publication = container.publication_service
    if image_path is None:
        return await publication.publish(draft)

    content_type = mimetypes.guess_type(image_path.name)[0] or ""
    content = image_path.read_bytes()
    active_uploader = uploader or HttpxBlobUploader.create()

    async def transfer(grant: UploadGrant) -> None:
        await active_uploader.upload(grant, content)

    try:
        return await publication.publish_with_image(
            draft, image_path.name, content_type, transfer
        )
    finally:
        if uploader is None:
            await active_uploader.close()


def build_parser() -> argparse.ArgumentParser:
    """Return the command line parser."""
    parser = argparse.ArgumentParser(prog="offer-catalog", description=BANNER)
    commands = parser.add_subparsers(dest="command")

    seed_parser = commands.add_parser("seed", help="create admin and sample offers")
    seed_parser.add_argument("--email", default=DEFAULT_ADMIN_EMAIL)
    seed_parser.add_argument("--password", default=DEFAULT_ADMIN_PASSWORD)
    seed_parser.add_argument("--name", default=DEFAULT_ADMIN_NAME)
    seed_parser.add_argument("--no-samples", action="store_true")

    admin_parser = commands.add_parser("create-admin", help="add an administrator")
    admin_parser.add_argument("--email", required=True)
    admin_parser.add_argument("--password", required=True)
    admin_parser.add_argument("--name", required=True)

    commands.add_parser("stats", help="print catalog statistics")

    clear_parser = commands.add_parser("clear", help="delete all data")
    clear_parser.add_argument("--yes", action="store_true", required=True)

    publish_parser = commands.add_parser("publish", help="create one offer")
    publish_parser.add_argument("--title", required=True)
    publish_parser.add_argument("--description", required=True)
    publish_parser.add_argument("--original-price", type=float, required=True)
    publish_parser.add_argument("--discounted-price", type=float, required=True)
    publish_parser.add_argument("--valid-from", type=_parse_datetime)
    publish_parser.add_argument("--valid-until", type=_parse_datetime, required=True)
    publish_parser.add_argument("--image", type=Path)
    return parser


def main(argv: list[str] | None = None) -> None:
    """Run the maintenance command line."""
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command is None:
        print(BANNER)
        parser.print_usage()
        return

    configure_logging()
    container = build_container()
    try:
        _run_command(container, args)
    except (OfferCatalogError, ValueError) as exc:
        parser.exit(1, f"error: {exc}\n")


def _run_command(container: AppContainer, args: argparse.Namespace) -> None:
    if args.command == "seed":
        asyncio.run(
            seed(
                container,
                email=args.email,
                password=args.password,
                name=args.name,
                with_samples=not args.no_samples,
            )
        )
    elif args.command == "create-admin":
        identity = container.credential_service.create_admin(
            args.email, args.name, args.password
        )
        print(f"Created administrator {identity.email}")
    elif args.command == "stats":
        asyncio.run(print_stats(container))
    elif args.command == "clear":
        asyncio.run(clear(container))
    elif args.command == "publish":
        draft = OfferDraft(
            title=args.title,
            description=args.description,
            original_price=args.original_price,
            discounted_price=args.discounted_price,
            valid_from=args.valid_from or datetime.now(tz=UTC),
            valid_until=args.valid_until,
        )
        offer = asyncio.run(publish(container, draft, args.image))
        print(f"Published offer {offer.id}")


def _parse_datetime(raw: str) -> datetime:
    parsed = datetime.fromisoformat(raw)
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed


if __name__ == "__main__":
    main()

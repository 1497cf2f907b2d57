#!/usr/bin/env python3
"""
Create or update restaurants and user profiles.

Restaurants and profiles are administered out-of-band; the web application
has no routes for creating them.

Usage:
    python scripts/provision.py restaurant tulia "Tulia Osteria" [--timezone America/Toronto]
    python scripts/provision.py user <identity-id> --name "Sam Lee" --role manager --restaurant tulia
    python scripts/provision.py list
"""
import argparse
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlmodel import Session, select

from app.checklist.bizdate import resolve_timezone
from app.core.database import create_db_and_tables, engine
from app.core.errors import ChecklistError
from app.models import Restaurant, Role, UserProfile


def upsert_restaurant(session: Session, restaurant_id: str, name: str, timezone: str | None) -> Restaurant:
    """Create the restaurant or update its name and timezone."""
    if timezone:
        resolve_timezone(timezone)
    restaurant = session.get(Restaurant, restaurant_id)
    if restaurant is None:
        restaurant = Restaurant(id=restaurant_id, name=name)
    restaurant.name = name
    restaurant.timezone = timezone
    session.add(restaurant)
    session.commit()
    session.refresh(restaurant)
    return restaurant


def upsert_user(
    session: Session,
    identity_id: str,
    name: str | None,
    email: str | None,
    role: Role,
    restaurant_ids: list[str],
) -> UserProfile:
    """Create the profile or replace its name, role and restaurants."""
    for restaurant_id in restaurant_ids:
        if session.get(Restaurant, restaurant_id) is None:
            raise ValueError(f"Unknown restaurant: {restaurant_id}")

    profile = session.get(UserProfile, identity_id)
    if profile is None:
        profile = UserProfile(id=identity_id)
    profile.display_name = name
    profile.email = email
    profile.role = role
    profile.restaurants = {restaurant_id: True for restaurant_id in restaurant_ids}
    session.add(profile)
    session.commit()
    session.refresh(profile)
    return profile


def list_all(session: Session) -> None:
    print("Restaurants:")
    for restaurant in session.exec(select(Restaurant).order_by(Restaurant.id)).all():
        print(f"  {restaurant.id}: {restaurant.name} ({restaurant.timezone or 'default timezone'})")
    print("Users:")
    for profile in session.exec(select(UserProfile).order_by(UserProfile.id)).all():
        enabled = ", ".join(k for k, v in profile.restaurants.items() if v) or "-"
        print(f"  {profile.id}: {profile.display_name or profile.email or '?'} [{profile.role.value}] {enabled}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Provision restaurants and user profiles")
    commands = parser.add_subparsers(dest="command", required=True)

    restaurant = commands.add_parser("restaurant", help="Create or update a restaurant")
    restaurant.add_argument("id", help="Restaurant key, e.g. tulia")
    restaurant.add_argument("name", help="Display name")
    restaurant.add_argument("--timezone", help="IANA timezone (defaults to DEFAULT_TIMEZONE)")

    user = commands.add_parser("user", help="Create or update a user profile")
    user.add_argument("identity_id", help="Identity id issued by the identity provider")
    user.add_argument("--name", help="Display name")
    user.add_argument("--email", help="Email address")
    user.add_argument("--role", choices=[r.value for r in Role], default=Role.MANAGER.value)
    user.add_argument(
        "--restaurant",
        action="append",
        default=[],
        dest="restaurants",
        help="Restaurant the user may work in (repeatable)",
    )

    commands.add_parser("list", help="List restaurants and users")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    create_db_and_tables()

    with Session(engine) as session:
        try:
            if args.command == "restaurant":
                restaurant = upsert_restaurant(session, args.id, args.name, args.timezone)
                print(f"Saved restaurant {restaurant.id}")
            elif args.command == "user":
                profile = upsert_user(
                    session, args.identity_id, args.name, args.email, Role(args.role), args.restaurants
                )
                print(f"Saved {profile.role.value} {profile.id}")
            else:
                list_all(session)
        except (ChecklistError, ValueError) as e:
            print(f"Error: {e}")
            return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())

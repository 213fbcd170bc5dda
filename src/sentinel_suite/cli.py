#!/usr/bin/env python3
"""cli.py - command line front end for Sentinel Suite.

Usage:
    sentinel validate <file.sav>
    sentinel inspect <file.sav>
    sentinel character <file.sav> <index-or-name>
    sentinel inventory <file.sav> [category]
    sentinel set-gold <file.sav> <amount> [--bank]
    sentinel set-medals <file.sav> <count>
    sentinel set-item <file.sav> <item-id-or-name> <count>
    sentinel set-name <file.sav> <character> <name>
    sentinel set-skill <file.sav> <character> <skill> <points>
    sentinel set-playtime <file.sav> <h:m:s> [--multiplayer]
    sentinel unlock-vocation <file.sav> <vocation> [--lock]
    sentinel fix-checksums <file.sav>

Output formats (place before the command):
    --format table    (default, human-readable)
    --format json     (machine-readable)

Edits refuse a file that fails validation unless --force is given. The file
is rewritten in place (with a .bak copy) unless --output names another path.
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .config import load_preferences
from .save_editor import layout
from .save_editor.gamedata import (
    ItemCatalog, LOCATIONS, PARTY_TRICKS, SKILLS, VOCATIONS,
    location_name, vocation_name,
)
from .save_editor.layout import ItemCategory
from .save_editor.save_manager import SaveDocument

logger = logging.getLogger(__name__)


# ============================================================================
# Helpers
# ============================================================================

def load_save(args, editing: bool = False) -> SaveDocument:
    """Load a save file. Exits on failure."""
    catalog = None
    prefs = load_preferences()
    if prefs.item_catalog:
        try:
            catalog = ItemCatalog.load(prefs.item_catalog)
        except (OSError, ValueError) as e:
            print(f"ERROR: Failed to load item catalog {prefs.item_catalog}: {e}", file=sys.stderr)
            sys.exit(1)

    try:
        doc = SaveDocument.from_file(args.file, catalog)
    except OSError as e:
        print(f"ERROR: Failed to read {args.file}: {e}", file=sys.stderr)
        sys.exit(1)

    force = getattr(args, "force", False)
    if not doc.validate():
        if editing and not force:
            print(f"ERROR: {args.file} is not a valid save (use --force to edit anyway)",
                  file=sys.stderr)
            sys.exit(1)
        if len(doc) < layout.MIN_FILE_SIZE:
            print(f"ERROR: {args.file} is too short to be a save file", file=sys.stderr)
            sys.exit(1)
        print(f"WARNING: {args.file} failed validation", file=sys.stderr)

    doc.active_slot = args.slot
    return doc


def write_save(doc: SaveDocument, args):
    output = Path(args.output) if args.output else Path(args.file)
    doc.save(output, backup=not args.no_backup)
    print(f"Saved to {output}")


def find_character(doc: SaveDocument, ref: str) -> int:
    """Resolve a character by index or (partial, case-insensitive) name."""
    count = doc.character_count
    if ref.isdigit():
        index = int(ref)
        if index >= count:
            print(f"ERROR: Character index {index} out of range (0-{count - 1})",
                  file=sys.stderr)
            sys.exit(1)
        return index

    needle = ref.lower()
    matches = [n for n in range(count) if needle in doc.character_name(n).lower()]
    if not matches:
        print(f"ERROR: No character matching '{ref}' found.", file=sys.stderr)
        names = [doc.character_name(n) for n in range(count)]
        if names:
            print(f"Available: {', '.join(names)}", file=sys.stderr)
        sys.exit(1)
    if len(matches) > 1:
        exact = [n for n in matches if doc.character_name(n).lower() == needle]
        if len(exact) == 1:
            return exact[0]
        print(f"ERROR: Multiple matches for '{ref}':", file=sys.stderr)
        for n in matches:
            print(f"  [{n}] {doc.character_name(n)}", file=sys.stderr)
        sys.exit(1)
    return matches[0]


def find_item(doc: SaveDocument, ref: str) -> int:
    if ref.isdigit():
        item_id = int(ref)
        if item_id not in doc.catalog:
            print(f"ERROR: Unknown item id {item_id}", file=sys.stderr)
            sys.exit(1)
        return item_id
    matches = doc.catalog.find(ref)
    exact = [i for i in matches if i.name.lower() == ref.lower()]
    if len(exact) == 1:
        return exact[0].id
    if len(matches) != 1:
        print(f"ERROR: '{ref}' matches {len(matches)} items", file=sys.stderr)
        for item in matches[:10]:
            print(f"  [{item.id}] {item.name}", file=sys.stderr)
        sys.exit(1)
    return matches[0].id


def find_skill(ref: str) -> int:
    if ref.isdigit():
        return int(ref)
    for skill in SKILLS:
        if skill.name.lower() == ref.lower():
            return skill.index
    print(f"ERROR: Unknown skill '{ref}'", file=sys.stderr)
    sys.exit(1)


def find_vocation(ref: str) -> int:
    if ref.isdigit():
        return int(ref)
    for vocation in VOCATIONS:
        if vocation.name.lower() == ref.lower():
            return vocation.id
    print(f"ERROR: Unknown vocation '{ref}'", file=sys.stderr)
    sys.exit(1)


def parse_time(text: str):
    parts = text.split(":")
    if len(parts) != 3 or not all(p.strip().lstrip("-").isdigit() for p in parts):
        raise argparse.ArgumentTypeError(f"expected H:M:S, got '{text}'")
    return tuple(int(p) for p in parts)


def emit(args, data: dict, table: str):
    if args.format == "json":
        print(json.dumps(data, indent=2))
    else:
        print(table)


# ============================================================================
# Readers
# ============================================================================

def read_character(doc: SaveDocument, n: int) -> dict:
    skills = {
        skill.name: doc.character_skill_allocation(n, skill.index)
        for skill in SKILLS
        if doc.character_skill_allocation(n, skill.index)
    }
    equipment = {}
    for category in layout.EQUIPMENT_CATEGORIES:
        item_id = doc.character_equipment(n, category)
        if item_id != layout.EMPTY_ITEM:
            equipment[category.label] = doc.catalog.name_of(item_id)
    held = []
    if doc.in_party(n):
        for i in range(layout.HELD_ITEM_SLOTS):
            item_id = doc.held_item(n, i)
            if item_id is not None and item_id != layout.EMPTY_ITEM:
                held.append(doc.catalog.name_of(item_id))
    return {
        "index": n,
        "name": doc.character_name(n),
        "hero": doc.is_hero(n),
        "in_party": doc.in_party(n),
        "vocation": vocation_name(doc.character_vocation(n)),
        "gender": doc.character_gender(n),
        "face": doc.character_face(n),
        "hairstyle": doc.character_hairstyle(n),
        "hair_color": doc.character_hair_color(n),
        "skin_color": doc.character_skin_color(n),
        "eye_color": doc.character_eye_color(n),
        "body": [doc.character_body_width(n), doc.character_body_height(n)],
        "unallocated_skill_points": doc.unallocated_skill_points(n),
        "skills": skills,
        "zoom": doc.knows_zoom(n),
        "egg_on": doc.knows_egg_on(n),
        "equipment": equipment,
        "held_items": held,
    }


def format_character_table(info: dict) -> str:
    role = "hero" if info["hero"] else ("party" if info["in_party"] else "standby")
    lines = [
        f"[{info['index']}] {info['name']} ({role})",
        "─" * 50,
        f"  Vocation:     {info['vocation']}",
        f"  Appearance:   gender={info['gender']} face={info['face']} "
        f"hair={info['hairstyle']}/{info['hair_color']} skin={info['skin_color']} "
        f"eyes={info['eye_color']} body={info['body'][0]}x{info['body'][1]}",
        f"  Spells:       zoom={'yes' if info['zoom'] else 'no'} "
        f"egg-on={'yes' if info['egg_on'] else 'no'}",
        f"  Skill points: {info['unallocated_skill_points']} unallocated",
    ]
    for name, points in info["skills"].items():
        lines.append(f"    {name:<16} {points:>3}")
    if info["equipment"]:
        lines.append("  Equipment:")
        for slot, name in info["equipment"].items():
            lines.append(f"    {slot:<10} {name}")
    if info["held_items"]:
        lines.append(f"  Held: {', '.join(info['held_items'])}")
    return "\n".join(lines)


# ============================================================================
# Commands
# ============================================================================

def cmd_validate(args) -> int:
    """Report magic and per-slot checksum status."""
    try:
        doc = SaveDocument.from_file(args.file)
    except OSError as e:
        print(f"ERROR: Failed to read {args.file}: {e}", file=sys.stderr)
        return 1

    valid = doc.validate()
    data = {"file": str(args.file), "size": len(doc), "valid": valid,
            "magic": doc.has_magic(), "slots": []}
    if len(doc) >= layout.MIN_FILE_SIZE:
        for index in range(layout.SLOT_COUNT):
            stored = doc.stored_checksums(index)
            computed = doc.computed_checksums(index)
            data["slots"].append({
                "slot": index,
                "valid": stored == computed,
                "stored": [f"0x{v:08X}" for v in stored],
                "computed": [f"0x{v:08X}" for v in computed],
            })

    lines = [f"{args.file}: {len(doc)} bytes, magic {'ok' if data['magic'] else 'BAD'}"]
    for slot in data["slots"]:
        status = "ok" if slot["valid"] else "MISMATCH"
        lines.append(f"  slot {slot['slot']}: {status}  stored A={slot['stored'][0]} "
                     f"B={slot['stored'][1]}  computed A={slot['computed'][0]} "
                     f"B={slot['computed'][1]}")
    lines.append("VALID" if valid else "INVALID")
    emit(args, data, "\n".join(lines))
    return 0 if valid else 1


def cmd_inspect(args) -> int:
    """Summary of the active slot."""
    doc = load_save(args)
    characters = [
        {"index": n, "name": doc.character_name(n),
         "vocation": vocation_name(doc.character_vocation(n)),
         "role": "hero" if doc.is_hero(n) else ("party" if doc.in_party(n) else "standby")}
        for n in range(doc.character_count)
    ]
    data = {
        "slot": doc.active_slot,
        "gold_on_hand": doc.gold_on_hand,
        "gold_in_bank": doc.gold_in_bank,
        "mini_medals": doc.mini_medals,
        "playtime": str(doc.playtime()),
        "multiplayer_time": str(doc.multiplayer_time()),
        "party_order": doc.party_order(),
        "characters": characters,
        "unlocked_vocations": [v.name for v in VOCATIONS if doc.vocation_unlocked(v.id)],
        "party_tricks": [name for i, name in enumerate(PARTY_TRICKS)
                         if doc.party_trick_learned(i)],
        "visited_locations": [location_name(i) for i in range(len(LOCATIONS))
                              if doc.visited_location(i)],
        "canvased_guests": [name for _, name in doc.canvased_guests()],
    }

    lines = [
        f"Save: {args.file}  (slot {doc.active_slot})",
        f"Gold: {doc.gold_on_hand:,}G on hand, {doc.gold_in_bank:,}G banked  |  "
        f"Mini medals: {doc.mini_medals}",
        f"Playtime: {data['playtime']}  |  Multiplayer: {data['multiplayer_time']}",
        "",
        "CHARACTERS",
        "─" * 50,
    ]
    for c in characters:
        lines.append(f"  [{c['index']:>2}] {c['name']:<10} {c['vocation']:<15} {c['role']}")
    lines.append("")
    lines.append(f"Vocations unlocked: {', '.join(data['unlocked_vocations']) or '-'}")
    lines.append(f"Party tricks: {len(data['party_tricks'])}/{len(PARTY_TRICKS)}")
    lines.append(f"Locations visited: {len(data['visited_locations'])}")
    lines.append(f"Canvased guests: {len(data['canvased_guests'])}")
    emit(args, data, "\n".join(lines))
    return 0


def cmd_character(args) -> int:
    """Show full character data."""
    doc = load_save(args)
    info = read_character(doc, find_character(doc, args.character))
    emit(args, info, format_character_table(info))
    return 0


def cmd_inventory(args) -> int:
    """List occupied inventory slots."""
    doc = load_save(args)
    if args.category:
        try:
            categories = [ItemCategory[args.category.upper()]]
        except KeyError:
            print(f"ERROR: Unknown category '{args.category}'", file=sys.stderr)
            return 1
    else:
        categories = list(ItemCategory)

    data = {}
    lines = []
    for category in categories:
        slots = doc.items(category)
        data[category.label] = [
            {"index": s.index, "id": s.item_id, "name": doc.catalog.name_of(s.item_id),
             "count": s.count}
            for s in slots
        ]
        lines.append(f"{category.label.upper()} ({len(slots)}/{layout.INVENTORY[category].length})")
        for s in slots:
            lines.append(f"  [{s.index:>3}] {s.item_id:>5}  {doc.catalog.name_of(s.item_id):<28} x{s.count}")
    emit(args, data, "\n".join(lines))
    return 0


def cmd_set_gold(args) -> int:
    doc = load_save(args, editing=True)
    if args.bank:
        value = doc.set_gold_in_bank(args.amount)
        print(f"Gold in bank set to {value:,}")
    else:
        value = doc.set_gold_on_hand(args.amount)
        print(f"Gold on hand set to {value:,}")
    write_save(doc, args)
    return 0


def cmd_set_medals(args) -> int:
    doc = load_save(args, editing=True)
    value = doc.set_mini_medals(args.count)
    print(f"Mini medals set to {value}")
    write_save(doc, args)
    return 0


def cmd_set_item(args) -> int:
    doc = load_save(args, editing=True)
    item_id = find_item(doc, args.item)
    count = max(0, min(args.count, 99))
    if not doc.set_item_count(item_id, count):
        print(f"ERROR: No free slot for {doc.catalog.name_of(item_id)}", file=sys.stderr)
        return 1
    print(f"{doc.catalog.name_of(item_id)} x{count}")
    write_save(doc, args)
    return 0


def cmd_set_name(args) -> int:
    doc = load_save(args, editing=True)
    n = find_character(doc, args.character)
    doc.set_character_name(n, args.name)
    print(f"Character {n} renamed to {doc.character_name(n)}")
    write_save(doc, args)
    return 0


def cmd_set_skill(args) -> int:
    doc = load_save(args, editing=True)
    n = find_character(doc, args.character)
    skill = find_skill(args.skill)
    if not 0 <= skill < len(SKILLS):
        print(f"ERROR: Skill index {skill} out of range", file=sys.stderr)
        return 1
    value = doc.set_character_skill_allocation(n, skill, args.points)
    print(f"{doc.character_name(n)}: {SKILLS[skill].name} = {value}")
    write_save(doc, args)
    return 0


def cmd_set_playtime(args) -> int:
    doc = load_save(args, editing=True)
    hours, minutes, seconds = args.time
    if args.multiplayer:
        value = doc.set_multiplayer_time(hours, minutes, seconds)
        print(f"Multiplayer time set to {value}")
    else:
        value = doc.set_playtime(hours, minutes, seconds)
        print(f"Playtime set to {value}")
    write_save(doc, args)
    return 0


def cmd_unlock_vocation(args) -> int:
    doc = load_save(args, editing=True)
    vocation_id = find_vocation(args.vocation)
    if not doc.set_vocation_unlocked(vocation_id, not args.lock):
        print(f"ERROR: Vocation id {vocation_id} out of range", file=sys.stderr)
        return 1
    state = "locked" if args.lock else "unlocked"
    print(f"{vocation_name(vocation_id)} {state}")
    write_save(doc, args)
    return 0


def cmd_fix_checksums(args) -> int:
    doc = load_save(args, editing=True)
    # save() refreshes both slots
    write_save(doc, args)
    return 0


# ============================================================================
# Parser
# ============================================================================

def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="sentinel",
        description="Inspect and edit Dragon Quest IX save files",
    )
    parser.add_argument("--format", choices=["table", "json"], default="table",
                        help="Output format (default: table)")
    parser.add_argument("--slot", type=int, choices=[0, 1], default=0,
                        help="Save slot to read and edit (default: 0)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    sub = parser.add_subparsers(dest="command")

    def edit_parser(name: str, help_text: str) -> argparse.ArgumentParser:
        p = sub.add_parser(name, help=help_text)
        p.add_argument("file", help="Path to the save file")
        p.add_argument("--output", "-o", help="Write to this path instead of in place")
        p.add_argument("--no-backup", action="store_true", help="Skip the .bak copy")
        p.add_argument("--force", action="store_true", help="Edit even if validation fails")
        return p

    p = sub.add_parser("validate", help="Check magic and checksums")
    p.add_argument("file", help="Path to the save file")

    p = sub.add_parser("inspect", help="Summary of the save")
    p.add_argument("file", help="Path to the save file")

    p = sub.add_parser("character", help="Show full character data")
    p.add_argument("file", help="Path to the save file")
    p.add_argument("character", help="Character index or name (partial match OK)")

    p = sub.add_parser("inventory", help="List bag contents")
    p.add_argument("file", help="Path to the save file")
    p.add_argument("category", nargs="?", help="Only this category (e.g. common, weapon)")

    p = edit_parser("set-gold", "Set gold on hand (or banked with --bank)")
    p.add_argument("amount", type=int)
    p.add_argument("--bank", action="store_true")

    p = edit_parser("set-medals", "Set mini medal count")
    p.add_argument("count", type=int)

    p = edit_parser("set-item", "Set how many of an item the bag holds")
    p.add_argument("item", help="Item id or name")
    p.add_argument("count", type=int, help="0 removes the item")

    p = edit_parser("set-name", "Rename a character")
    p.add_argument("character", help="Character index or name")
    p.add_argument("name", help="New name (max 10 characters)")

    p = edit_parser("set-skill", "Allocate skill points")
    p.add_argument("character", help="Character index or name")
    p.add_argument("skill", help="Skill index or name")
    p.add_argument("points", type=int, help="0-100")

    p = edit_parser("set-playtime", "Set playtime")
    p.add_argument("time", type=parse_time, help="H:M:S")
    p.add_argument("--multiplayer", action="store_true", help="Set multiplayer time instead")

    p = edit_parser("unlock-vocation", "Unlock (or --lock) a vocation")
    p.add_argument("vocation", help="Vocation id or name")
    p.add_argument("--lock", action="store_true")

    edit_parser("fix-checksums", "Recompute both slots' checksums")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if not args.command:
        parser.print_help()
        return 0

    commands = {
        "validate": cmd_validate,
        "inspect": cmd_inspect,
        "character": cmd_character,
        "inventory": cmd_inventory,
        "set-gold": cmd_set_gold,
        "set-medals": cmd_set_medals,
        "set-item": cmd_set_item,
        "set-name": cmd_set_name,
        "set-skill": cmd_set_skill,
        "set-playtime": cmd_set_playtime,
        "unlock-vocation": cmd_unlock_vocation,
        "fix-checksums": cmd_fix_checksums,
    }

    cmd_func = commands.get(args.command)
    if cmd_func is None:
        parser.print_help()
        return 1
    try:
        return cmd_func(args)
    except OSError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())

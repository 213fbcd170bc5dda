"""
Save Editor Panel - Dragon Quest IX save editor

Party, items, misc and DLC tabs over the document held in STATE. Every
widget writes straight through to the SaveDocument; nothing is applied to
disk until Save.
"""

import logging
from pathlib import Path
from typing import Dict, Optional

import dearpygui.dearpygui as dpg

from ...config import save_preferences
from ...save_editor import layout
from ...save_editor.gamedata import (
    ItemCatalog, LOCATIONS, PARTY_TRICKS, SKILLS, SPECIAL_GUESTS, VOCATIONS,
    vocation_name,
)
from ...save_editor.layout import ItemCategory
from ...save_editor.save_manager import SaveDocument
from ..events import EventBus, Events
from ..icons import IconRegistry
from ..state import STATE
from ..theme import Colors

logger = logging.getLogger(__name__)

NOTHING = "---"
MAX_ITEM_COUNT = 99


class SaveEditorPanel:
    """Save editor panel - party, inventory, world flags, guests."""

    TAG = "save_editor"
    OPEN_DIALOG_TAG = "save_editor_open_dialog"
    SAVE_AS_DIALOG_TAG = "save_editor_save_as_dialog"
    MESSAGE_TAG = "save_editor_message"
    SLOT_TAG = "save_editor_slot"

    PARTY_LIST_TAG = "save_party_list"
    CHARACTER_TAG = "save_character_details"
    ITEMS_TAG = "save_items_table"
    ITEM_CATEGORY_TAG = "save_item_category"
    MISC_TAG = "save_misc"
    DLC_TAG = "save_dlc"

    def __init__(self, width: int = 900, height: int = 720, pos: tuple = (10, 30),
                 icons: Optional[IconRegistry] = None):
        self.width = width
        self.height = height
        self.pos = pos
        self.icons = icons or IconRegistry()
        self.item_category = ItemCategory.COMMON
        self._create_file_dialogs()
        self._create_panel()
        self._subscribe_events()

    # ------------------------------------------------------------------
    # Setup
    # ------------------------------------------------------------------

    def _subscribe_events(self):
        EventBus.subscribe(Events.OPEN_REQUESTED, lambda _: self._browse_open())
        EventBus.subscribe(Events.SAVE_REQUESTED, lambda _: self._save_changes())
        EventBus.subscribe(Events.SAVE_AS_REQUESTED, lambda _: self._browse_save_as())

    def _create_file_dialogs(self):
        """Create open / save-as dialogs."""
        default_path = STATE.preferences.last_directory or ""
        with dpg.file_dialog(
            directory_selector=False,
            show=False,
            callback=self._on_open_selected,
            tag=self.OPEN_DIALOG_TAG,
            width=700,
            height=450,
            default_path=default_path,
            modal=True
        ):
            dpg.add_file_extension(".sav", color=(0, 212, 255, 255))
            dpg.add_file_extension(".*")

        with dpg.file_dialog(
            directory_selector=False,
            show=False,
            callback=self._on_save_as_selected,
            tag=self.SAVE_AS_DIALOG_TAG,
            width=700,
            height=450,
            default_path=default_path,
            default_filename="edited",
            modal=True
        ):
            dpg.add_file_extension(".sav", color=(0, 212, 255, 255))

    def _create_panel(self):
        """Create the save editor panel."""
        with dpg.window(
            label="Save Editor",
            tag=self.TAG,
            width=self.width,
            height=self.height,
            pos=self.pos,
            on_close=self._on_close
        ):
            with dpg.group(horizontal=True):
                dpg.add_button(label="Open...", callback=self._browse_open, width=90)
                dpg.add_button(label="Save", callback=self._save_changes, width=90)
                dpg.add_button(label="Save As...", callback=self._browse_save_as, width=90)
                dpg.add_button(label="Revert", callback=self._revert_changes, width=90)
                dpg.add_text("Slot:", color=Colors.ACCENT_BLUE)
                dpg.add_radio_button(
                    items=["0", "1"],
                    default_value="0",
                    horizontal=True,
                    tag=self.SLOT_TAG,
                    callback=self._on_slot_changed
                )

            dpg.add_text("No save loaded", tag=self.MESSAGE_TAG, color=Colors.TEXT_DIM)
            dpg.add_separator()

            with dpg.tab_bar():
                with dpg.tab(label="Party"):
                    with dpg.group(horizontal=True):
                        with dpg.child_window(width=220, border=True, tag=self.PARTY_LIST_TAG):
                            dpg.add_text("Load a save first", color=Colors.TEXT_DIM)
                        with dpg.child_window(border=True, tag=self.CHARACTER_TAG):
                            dpg.add_text("Select a character", color=Colors.TEXT_DIM)

                with dpg.tab(label="Items"):
                    with dpg.group(horizontal=True):
                        dpg.add_text("Category:", color=Colors.ACCENT_BLUE)
                        dpg.add_combo(
                            items=[c.label for c in ItemCategory],
                            default_value=self.item_category.label,
                            width=160,
                            tag=self.ITEM_CATEGORY_TAG,
                            callback=self._on_category_changed
                        )
                    with dpg.child_window(border=True, tag=self.ITEMS_TAG):
                        dpg.add_text("Load a save first", color=Colors.TEXT_DIM)

                with dpg.tab(label="Misc"):
                    with dpg.child_window(border=False, tag=self.MISC_TAG):
                        dpg.add_text("Load a save first", color=Colors.TEXT_DIM)

                with dpg.tab(label="DLC"):
                    with dpg.child_window(border=False, tag=self.DLC_TAG):
                        dpg.add_text("Load a save first", color=Colors.TEXT_DIM)

    # ------------------------------------------------------------------
    # File handling
    # ------------------------------------------------------------------

    def _message(self, text: str, color=Colors.TEXT_DIM):
        dpg.set_value(self.MESSAGE_TAG, text)
        dpg.configure_item(self.MESSAGE_TAG, color=color)
        EventBus.publish(Events.STATUS_UPDATE, text)

    def _browse_open(self):
        dpg.show_item(self.OPEN_DIALOG_TAG)

    def _browse_save_as(self):
        if STATE.document is None:
            self._message("No save loaded", Colors.ACCENT_YELLOW)
            return
        dpg.show_item(self.SAVE_AS_DIALOG_TAG)

    def _on_open_selected(self, sender, app_data):
        path = app_data.get("file_path_name") if app_data else None
        if path:
            self.load_file(Path(path))

    def _on_save_as_selected(self, sender, app_data):
        path = app_data.get("file_path_name") if app_data else None
        if path:
            self._write(Path(path))

    def _catalog(self) -> Optional[ItemCatalog]:
        if not STATE.preferences.item_catalog:
            return None
        try:
            return ItemCatalog.load(STATE.preferences.item_catalog)
        except (OSError, ValueError) as e:
            logger.warning(f"Item catalog {STATE.preferences.item_catalog} unusable: {e}")
            return None

    def load_file(self, path: Path):
        """Load and validate a save; invalid files are never shown."""
        try:
            doc = SaveDocument.from_file(path, self._catalog())
        except OSError as e:
            self._message(f"Could not read {path.name}: {e}", Colors.ACCENT_RED)
            return

        if not doc.validate():
            self._message(f"{path.name} is not a valid DQIX save", Colors.ACCENT_RED)
            EventBus.publish(Events.FILE_REJECTED, path)
            return

        STATE.set_document(doc, path)
        STATE.preferences.add_recent(str(path))
        try:
            save_preferences(STATE.preferences)
        except OSError as e:
            logger.warning(f"Could not update recent files: {e}")

        dpg.set_value(self.SLOT_TAG, "0")
        self.refresh()
        self._message(f"Loaded {path.name}", Colors.ACCENT_GREEN)
        EventBus.publish(Events.FILE_LOADED, path)

    def _write(self, path: Path):
        try:
            STATE.document.save(path, backup=STATE.preferences.backup_on_save)
        except OSError as e:
            self._message(f"Save failed: {e}", Colors.ACCENT_RED)
            return
        STATE.current_file = path
        STATE.dirty = False
        self._message(f"Saved {path.name}", Colors.ACCENT_GREEN)
        EventBus.publish(Events.FILE_SAVED, path)

    def _save_changes(self):
        if STATE.document is None or STATE.current_file is None:
            self._message("No save loaded", Colors.ACCENT_YELLOW)
            return
        self._write(STATE.current_file)

    def _revert_changes(self):
        """Reload from disk, discarding changes."""
        if STATE.current_file is not None:
            self.load_file(STATE.current_file)
            self._message("Changes reverted")

    def _on_slot_changed(self, sender, value):
        if STATE.document is None:
            return
        STATE.document.active_slot = int(value)
        STATE.current_character = None
        self.refresh()
        EventBus.publish(Events.SLOT_CHANGED, int(value))

    def _modified(self):
        STATE.mark_dirty()
        EventBus.publish(Events.SAVE_MODIFIED)

    # ------------------------------------------------------------------
    # Refresh
    # ------------------------------------------------------------------

    def refresh(self):
        """Rebuild every tab from the document."""
        if STATE.document is None:
            return
        self._populate_party()
        self._populate_character()
        self._populate_items()
        self._populate_misc()
        self._populate_dlc()

    def _icon(self, texture: Optional[str]):
        if texture:
            dpg.add_image(texture)

    # ------------------------------------------------------------------
    # Party tab
    # ------------------------------------------------------------------

    def _populate_party(self):
        doc = STATE.document
        dpg.delete_item(self.PARTY_LIST_TAG, children_only=True)
        for n in range(doc.character_count):
            role = "hero" if doc.is_hero(n) else ("party" if doc.in_party(n) else "standby")
            with dpg.group(horizontal=True, parent=self.PARTY_LIST_TAG):
                self._icon(self.icons.vocation_icon(doc.character_vocation(n)))
                dpg.add_selectable(
                    label=f"{doc.character_name(n) or '(unnamed)'}  [{role}]",
                    default_value=(n == STATE.current_character),
                    callback=lambda s, a, u: self._select_character(u),
                    user_data=n
                )

    def _select_character(self, n: int):
        STATE.current_character = n
        self._populate_party()
        self._populate_character()

    def _int_field(self, label: str, value: int, setter, max_value: int, width: int = 120):
        def on_change(sender, new_value):
            setter(new_value)
            self._modified()

        with dpg.group(horizontal=True):
            dpg.add_text(f"{label}:", color=Colors.ACCENT_BLUE)
            dpg.add_input_int(
                default_value=value,
                min_value=0,
                max_value=max_value,
                min_clamped=True,
                max_clamped=True,
                width=width,
                callback=on_change
            )

    def _item_combo(self, label: str, current: int, category: ItemCategory, setter):
        doc = STATE.document
        choices: Dict[str, int] = {NOTHING: layout.EMPTY_ITEM}
        for item in doc.catalog.in_category(category):
            choices[f"{item.name} [{item.id}]"] = item.id
        current_label = next((k for k, v in choices.items() if v == current),
                             f"{doc.catalog.name_of(current)} [{current}]")

        def on_change(sender, value):
            setter(choices.get(value, current))
            self._modified()

        with dpg.group(horizontal=True):
            dpg.add_text(f"{label}:", color=Colors.ACCENT_BLUE)
            dpg.add_combo(items=list(choices), default_value=current_label, width=240,
                          callback=on_change)

    def _populate_character(self):
        doc = STATE.document
        n = STATE.current_character
        dpg.delete_item(self.CHARACTER_TAG, children_only=True)
        if n is None or n >= doc.character_count:
            dpg.add_text("Select a character", color=Colors.TEXT_DIM, parent=self.CHARACTER_TAG)
            return

        with dpg.group(parent=self.CHARACTER_TAG):
            with dpg.group(horizontal=True):
                dpg.add_text("Name:", color=Colors.ACCENT_BLUE)
                dpg.add_input_text(
                    default_value=doc.character_name(n),
                    width=160,
                    on_enter=True,
                    callback=lambda s, value: self._rename(n, value)
                )

            vocations = {v.name: v.id for v in VOCATIONS}
            with dpg.group(horizontal=True):
                dpg.add_text("Vocation:", color=Colors.ACCENT_BLUE)
                dpg.add_combo(
                    items=list(vocations),
                    default_value=vocation_name(doc.character_vocation(n)),
                    width=160,
                    callback=lambda s, value: self._apply(
                        doc.set_character_vocation, n, vocations[value])
                )

            with dpg.collapsing_header(label="Appearance", default_open=True):
                with dpg.group(horizontal=True):
                    dpg.add_text("Gender:", color=Colors.ACCENT_BLUE)
                    dpg.add_radio_button(
                        items=["Male", "Female"],
                        default_value="Female" if doc.character_gender(n) else "Male",
                        horizontal=True,
                        callback=lambda s, value: self._apply(
                            doc.set_character_gender, n, 1 if value == "Female" else 0)
                    )
                self._int_field("Face", doc.character_face(n),
                                lambda v: doc.set_character_face(n, v), 0xFF)
                self._int_field("Hairstyle", doc.character_hairstyle(n),
                                lambda v: doc.set_character_hairstyle(n, v), 0xFF)
                self._int_field("Hair color", doc.character_hair_color(n),
                                lambda v: doc.set_character_hair_color(n, v),
                                layout.HAIR_COLOR.max_value)
                self._int_field("Skin color", doc.character_skin_color(n),
                                lambda v: doc.set_character_skin_color(n, v),
                                layout.SKIN_COLOR.max_value)
                self._int_field("Eye color", doc.character_eye_color(n),
                                lambda v: doc.set_character_eye_color(n, v),
                                layout.EYE_COLOR.max_value)
                self._int_field("Body width", doc.character_body_width(n),
                                lambda v: doc.set_character_body_width(n, v), 0xFFFF)
                self._int_field("Body height", doc.character_body_height(n),
                                lambda v: doc.set_character_body_height(n, v), 0xFFFF)

            with dpg.collapsing_header(label="Skills", default_open=True):
                self._int_field("Unallocated points", doc.unallocated_skill_points(n),
                                lambda v: doc.set_unallocated_skill_points(n, v),
                                layout.MAX_UNALLOCATED_POINTS)
                for skill in SKILLS:
                    with dpg.group(horizontal=True):
                        dpg.add_text(f"{skill.name:<16}", color=Colors.ACCENT_YELLOW)
                        dpg.add_slider_int(
                            default_value=doc.character_skill_allocation(n, skill.index),
                            min_value=0,
                            max_value=layout.MAX_SKILL_ALLOCATION,
                            width=200,
                            callback=lambda s, value, u: self._apply(
                                doc.set_character_skill_allocation, n, u, value),
                            user_data=skill.index
                        )
                with dpg.group(horizontal=True):
                    dpg.add_checkbox(
                        label="Zoom",
                        default_value=doc.knows_zoom(n),
                        callback=lambda s, value: self._apply(doc.set_knows_zoom, n, value)
                    )
                    dpg.add_checkbox(
                        label="Egg On",
                        default_value=doc.knows_egg_on(n),
                        callback=lambda s, value: self._apply(doc.set_knows_egg_on, n, value)
                    )

            with dpg.collapsing_header(label="Equipment", default_open=False):
                for category in layout.EQUIPMENT_CATEGORIES:
                    self._item_combo(
                        category.label,
                        doc.character_equipment(n, category),
                        category,
                        lambda item_id, c=category: doc.set_character_equipment(n, c, item_id),
                    )

            if doc.in_party(n):
                with dpg.collapsing_header(label="Held items", default_open=False):
                    for i in range(layout.HELD_ITEM_SLOTS):
                        self._item_combo(
                            f"Slot {i + 1}",
                            doc.held_item(n, i),
                            ItemCategory.COMMON,
                            lambda item_id, i=i: doc.set_held_item(n, i, item_id),
                        )

    def _apply(self, setter, *args):
        setter(*args)
        self._modified()

    def _rename(self, n: int, name: str):
        STATE.document.set_character_name(n, name)
        self._modified()
        self._populate_party()

    # ------------------------------------------------------------------
    # Items tab
    # ------------------------------------------------------------------

    def _on_category_changed(self, sender, value):
        self.item_category = ItemCategory[value.upper()]
        self._populate_items()

    def _populate_items(self):
        doc = STATE.document
        category = self.item_category
        dpg.delete_item(self.ITEMS_TAG, children_only=True)

        slots = doc.items(category)
        capacity = layout.INVENTORY[category].length
        dpg.add_text(f"{len(slots)}/{capacity} slots used", color=Colors.TEXT_DIM,
                     parent=self.ITEMS_TAG)

        with dpg.table(header_row=True, parent=self.ITEMS_TAG, row_background=True):
            dpg.add_table_column(label="", width_fixed=True)
            dpg.add_table_column(label="Item")
            dpg.add_table_column(label="Count", width_fixed=True)
            for slot in slots:
                info = doc.catalog.get(slot.item_id)
                with dpg.table_row():
                    if info is not None and self.icons.item_icon(info.icon):
                        dpg.add_image(self.icons.item_icon(info.icon))
                    else:
                        dpg.add_text("")
                    dpg.add_text(doc.catalog.name_of(slot.item_id))
                    dpg.add_input_int(
                        default_value=slot.count,
                        min_value=0,
                        max_value=MAX_ITEM_COUNT,
                        min_clamped=True,
                        max_clamped=True,
                        width=100,
                        on_enter=True,
                        callback=lambda s, value, u: self._set_count(u, value),
                        user_data=slot.item_id
                    )

        owned = {s.item_id for s in slots}
        addable = {f"{i.name} [{i.id}]": i.id
                   for i in doc.catalog.in_category(category) if i.id not in owned}
        if addable:
            dpg.add_separator(parent=self.ITEMS_TAG)
            with dpg.group(horizontal=True, parent=self.ITEMS_TAG):
                combo = dpg.add_combo(items=list(addable), width=260)
                amount = dpg.add_input_int(default_value=1, min_value=1,
                                           max_value=MAX_ITEM_COUNT,
                                           min_clamped=True, max_clamped=True, width=100)
                dpg.add_button(
                    label="Add",
                    callback=lambda: self._add_item(addable.get(dpg.get_value(combo)),
                                                    dpg.get_value(amount))
                )

    def _set_count(self, item_id: int, count: int):
        if not STATE.document.set_item_count(item_id, count):
            self._message("No free slot in that category", Colors.ACCENT_YELLOW)
            return
        self._modified()
        self._populate_items()

    def _add_item(self, item_id: Optional[int], count: int):
        if item_id is None:
            return
        self._set_count(item_id, count)

    # ------------------------------------------------------------------
    # Misc tab
    # ------------------------------------------------------------------

    def _time_fields(self, label: str, getter, setter):
        def on_change(sender, new_value, index):
            parts = list(getter())
            parts[index] = new_value
            setter(*parts)
            self._modified()

        limits = (layout.MAX_HOURS, layout.MAX_MINUTES_SECONDS, layout.MAX_MINUTES_SECONDS)
        with dpg.group(horizontal=True):
            dpg.add_text(f"{label}:", color=Colors.ACCENT_BLUE)
            for index, (part, high) in enumerate(zip(getter(), limits)):
                dpg.add_input_int(
                    default_value=part, min_value=0, max_value=high,
                    min_clamped=True, max_clamped=True, width=90,
                    callback=on_change, user_data=index
                )

    def _flag_grid(self, names, getter, setter, columns: int = 3):
        with dpg.table(header_row=False):
            for _ in range(columns):
                dpg.add_table_column()
            for start in range(0, len(names), columns):
                with dpg.table_row():
                    for index in range(start, min(start + columns, len(names))):
                        key, name = names[index]
                        dpg.add_checkbox(
                            label=name,
                            default_value=bool(getter(key)),
                            callback=lambda s, value, u: self._apply(setter, u, value),
                            user_data=key
                        )

    def _populate_misc(self):
        doc = STATE.document
        dpg.delete_item(self.MISC_TAG, children_only=True)

        with dpg.group(parent=self.MISC_TAG):
            with dpg.collapsing_header(label="Money", default_open=True):
                self._int_field("Gold on hand", doc.gold_on_hand, doc.set_gold_on_hand,
                                layout.MAX_GOLD_ON_HAND, width=160)
                self._int_field("Gold in bank", doc.gold_in_bank, doc.set_gold_in_bank,
                                layout.MAX_GOLD_IN_BANK, width=160)
                self._int_field("Mini medals", doc.mini_medals, doc.set_mini_medals,
                                0x7FFFFFFF, width=160)

            with dpg.collapsing_header(label="Time", default_open=True):
                self._time_fields("Playtime", doc.playtime, doc.set_playtime)
                self._time_fields("Multiplayer", doc.multiplayer_time, doc.set_multiplayer_time)

            with dpg.collapsing_header(label="Vocations", default_open=True):
                self._flag_grid([(v.id, v.name) for v in VOCATIONS if v.unlockable],
                                doc.vocation_unlocked, doc.set_vocation_unlocked)

            with dpg.collapsing_header(label="Party tricks", default_open=False):
                self._flag_grid(list(enumerate(PARTY_TRICKS)),
                                doc.party_trick_learned, doc.set_party_trick_learned)

            with dpg.collapsing_header(label="Visited locations", default_open=False):
                self._flag_grid(list(enumerate(LOCATIONS)),
                                doc.visited_location, doc.set_visited_location)

    # ------------------------------------------------------------------
    # DLC tab
    # ------------------------------------------------------------------

    def _populate_dlc(self):
        doc = STATE.document
        dpg.delete_item(self.DLC_TAG, children_only=True)

        with dpg.group(parent=self.DLC_TAG):
            with dpg.collapsing_header(label="Special guests", default_open=True):
                self._flag_grid(list(enumerate(SPECIAL_GUESTS)),
                                doc.special_guest_visiting, doc.set_special_guest_visiting)

            with dpg.collapsing_header(label="Canvased guests", default_open=True):
                guests = doc.canvased_guests()
                if not guests:
                    dpg.add_text("No guests canvased", color=Colors.TEXT_DIM)
                for index, name in guests:
                    with dpg.group(horizontal=True):
                        dpg.add_text(f"#{index + 1:<3}", color=Colors.TEXT_DIM)
                        dpg.add_input_text(
                            default_value=name,
                            width=160,
                            on_enter=True,
                            callback=lambda s, value, u: self._apply(
                                doc.set_canvased_guest_name, u, value),
                            user_data=index
                        )

    # ------------------------------------------------------------------

    def _on_close(self):
        """Handle panel close."""
        dpg.configure_item(self.TAG, show=False)

    @classmethod
    def show(cls):
        """Show the panel."""
        if dpg.does_item_exist(cls.TAG):
            dpg.configure_item(cls.TAG, show=True)
            dpg.focus_item(cls.TAG)

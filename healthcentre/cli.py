"""
Interactive operator menu for the member registry.

A thin driver: it re-prompts until input passes MemberRules, then calls the
registry and the selected record. All business rules live in the domain and
services packages.
"""

from typing import TextIO

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm, FloatPrompt, IntPrompt, Prompt
from rich.table import Table

from healthcentre.config import get_config
from healthcentre.domain.categories import Gender
from healthcentre.domain.errors import InvalidReading, ValidationFailed
from healthcentre.domain.models import MemberRecord, summary_header
from healthcentre.domain.rules import RuleField
from healthcentre.services.member_registry import MemberRegistry
from healthcentre.services.member_store import configure_logging, logger
from healthcentre.services.sql_store import SqlMemberStore

MAIN_MENU = """\
1. Display All Member Details      5. Record HC Member visit
2. Display/Select Member detail    6. Update blood pressure
3. Add New Health Centre Member    7. Record F2F consultation
4. Review HC Members (Stats Menu)  8. Update weight and age
                      9. Exit"""

STATS_MENU = """\
1. Display HC Members by gender
2. Display all HC Members with high blood pressure
3. Display all HC Members without a yearly F2F consultation
4. Display all HC Members that have visited the centre less than {threshold} times
------------------------------------------------
5. Reset all HC members F2F consultation to false
------------------------------------------------
6. Return to main menu"""


class MemberMenu:
    """Main menu and statistics sub-menu over one registry."""

    def __init__(
        self,
        registry: MemberRegistry,
        console: Console | None = None,
        stream: TextIO | None = None,
        pause: bool = True,
    ) -> None:
        self.registry = registry
        self.rules = registry.rules
        self.console = console or Console()
        self.stream = stream
        self.pause = pause
        self.selected: MemberRecord | None = None
        self.logger = logger.bind(component="member_menu")

    # Main loop

    def run(self) -> None:
        actions = {
            1: self.display_all_members,
            2: self.select_member,
            3: self.add_new_member,
            4: self.stats_menu,
            5: self.record_visit,
            6: self.update_blood_pressure,
            7: self.record_consultation,
            8: self.update_weight_and_age,
        }
        while True:
            self._heading("Personal Trainer Review System - Main Menu")
            current = self.selected.id if self.selected else "None"
            self.console.print(f"Current selected Member: {current}\n")
            self.console.print(MAIN_MENU)
            choice = self._menu_choice(9)
            if choice == 9:
                self.console.print("Thanks for using the Personal Trainer Review System!")
                self.console.print("Goodbye!")
                return
            actions[choice]()
            self._wait()

    def stats_menu(self) -> None:
        actions = {
            1: self.display_members_by_gender,
            2: self.display_high_blood_pressure,
            3: self.display_due_for_consultation,
            4: self.display_low_visits,
            5: self.reset_all_consultations,
        }
        while True:
            self._heading("Stats Menu")
            self.console.print(
                STATS_MENU.format(threshold=self.registry.config.low_visit_threshold)
            )
            choice = self._menu_choice(6)
            if choice == 6:
                self.console.print("Returning to main menu...")
                return
            actions[choice]()
            self._wait()

    # Main menu actions

    def display_all_members(self) -> None:
        self._heading("ALL HEALTH CENTRE MEMBERS")
        members = self.registry.members()
        if not members:
            self.console.print("No members registered in the system.")
            return
        self._print_summary(members)
        self.console.print(f"Total members: {self.registry.count()}")

    def select_member(self) -> None:
        self._heading("SELECT MEMBER")
        member_id = self._ask("Enter HC Number to select")
        result = self.registry.find_by_id(member_id)
        if result.is_err():
            self.console.print("Member not found.")
            return
        self.selected = result.unwrap()
        self.logger.debug("member_selected", member_id=self.selected.id)
        self._print_details(self.selected)
        self.console.print("Member selected successfully!")

    def add_new_member(self) -> None:
        self._heading("ADD NEW HEALTH CENTRE MEMBER")
        registration = self.registry.add_member(
            forename=self._ask_text("Enter forename", "name"),
            surname=self._ask_text("Enter surname", "name"),
            gender=self._ask_gender(),
            age=self._ask_int(f"Enter age ({self.rules.min_age}-{self.rules.max_age})", "age"),
            weight=self._ask_weight(),
            address=self._ask_text(
                f"Enter address ({self.rules.min_address_length}-"
                f"{self.rules.max_address_length} characters)",
                "address",
            ),
        )
        self.console.print(f"New member added successfully. ID: {registration.record.id}")
        if registration.write_error is not None:
            self.console.print(
                f"Warning: member kept in memory only ({registration.write_error})",
                style="yellow",
                markup=False,
            )

    def record_visit(self) -> None:
        member = self._require_selected()
        if member is None:
            return
        self._heading("RECORD MEMBER VISIT")
        member.record_visit()
        self._persist(member)
        self.console.print(f"Visit recorded. Total visits: {member.visit_tally}")

    def update_blood_pressure(self) -> None:
        member = self._require_selected()
        if member is None:
            return
        self._heading("UPDATE BLOOD PRESSURE")
        systolic = self._ask_int(
            f"Enter systolic pressure ({self.rules.min_systolic}-{self.rules.max_systolic})",
            "systolic",
        )
        diastolic = self._ask_int(
            f"Enter diastolic pressure ({self.rules.min_diastolic}-{self.rules.max_diastolic})",
            "diastolic",
        )
        try:
            category = member.classify_blood_pressure(systolic, diastolic, self.rules)
        except InvalidReading:
            self.console.print("Invalid blood pressure readings provided.")
            return
        self._persist(member)
        self.console.print("Blood pressure updated successfully!")
        self.console.print(f"New blood pressure classification: {category.value.upper()}")

    def record_consultation(self) -> None:
        member = self._require_selected()
        if member is None:
            return
        self._heading("RECORD F2F CONSULTATION")
        member.record_consultation()
        self._persist(member)
        self.console.print(f"F2F consultation recorded for {member.full_name}")

    def update_weight_and_age(self) -> None:
        member = self._require_selected()
        if member is None:
            return
        self._heading("UPDATE WEIGHT AND AGE")
        self.console.print(f"Current weight: {member.weight} kg")
        self.console.print(f"Current age: {member.age} years")

        weight = self._ask_weight()
        age = self._ask_int(f"Enter age ({self.rules.min_age}-{self.rules.max_age})", "age")
        if member.set_weight(weight, self.rules) and member.set_age(age, self.rules):
            self._persist(member)
            self.console.print("Weight and age updated successfully!")

    # Stats menu actions

    def display_members_by_gender(self) -> None:
        self._heading("MEMBERS BY GENDER")
        gender = self._ask_gender()
        self._print_summary(
            self.registry.filter_by_gender(gender),
            empty_message=f"No {gender.label.lower()} members found.",
        )

    def display_high_blood_pressure(self) -> None:
        self._heading("MEMBERS WITH HIGH BLOOD PRESSURE")
        self._print_summary(
            self.registry.filter_high_blood_pressure(),
            empty_message="No members with high blood pressure found.",
        )

    def display_due_for_consultation(self) -> None:
        self._heading("MEMBERS WITHOUT YEARLY F2F CONSULTATION")
        self._print_summary(
            self.registry.filter_due_for_consultation(),
            empty_message="All members have completed their yearly consultation.",
        )

    def display_low_visits(self) -> None:
        threshold = self.registry.config.low_visit_threshold
        self._heading(f"MEMBERS WITH LESS THAN {threshold} VISITS")
        self._print_summary(
            self.registry.filter_low_visits(threshold),
            empty_message=f"All members have {threshold} or more visits.",
        )

    def reset_all_consultations(self) -> None:
        self._heading("RESET ALL CONSULTATIONS")
        confirmed = Confirm.ask(
            "Are you sure you want to reset ALL consultations?",
            console=self.console,
            stream=self.stream,
        )
        if not confirmed:
            self.logger.info("consultation_reset_cancelled")
            self.console.print("Operation has been cancelled.")
            return

        result = self.registry.reset_all_consultations()
        self.console.print("All member consultations have been reset to false.")
        if result.is_err():
            self.console.print(
                f"Warning: reset not saved to the database ({result.unwrap_err()})",
                style="yellow",
                markup=False,
            )

    # Input helpers

    def _ask(self, prompt: str) -> str:
        return Prompt.ask(prompt, console=self.console, stream=self.stream).strip()

    def _menu_choice(self, highest: int) -> int:
        return IntPrompt.ask(
            "Please enter menu choice",
            choices=[str(i) for i in range(1, highest + 1)],
            show_choices=False,
            console=self.console,
            stream=self.stream,
        )

    def _ask_text(self, prompt: str, field: RuleField) -> str:
        while True:
            value = self._ask(prompt)
            if self._passes(field, value):
                return value

    def _ask_int(self, prompt: str, field: RuleField) -> int:
        while True:
            value = IntPrompt.ask(prompt, console=self.console, stream=self.stream)
            if self._passes(field, value):
                return value

    def _ask_weight(self) -> float:
        prompt = f"Enter weight in kg ({self.rules.min_weight:g}-{self.rules.max_weight:g})"
        while True:
            value = FloatPrompt.ask(prompt, console=self.console, stream=self.stream)
            if self._passes("weight", value):
                return value

    def _ask_gender(self) -> Gender:
        while True:
            value = self._ask("Enter gender (M/F)")
            try:
                return Gender.parse(value)
            except ValueError:
                self.console.print(self.rules.message_for("gender"))

    def _passes(self, field: RuleField, value: object) -> bool:
        try:
            self.rules.check(field, value)
        except ValidationFailed as e:
            self.console.print(str(e))
            return False
        return True

    # Output helpers

    def _heading(self, title: str) -> None:
        self.console.print(Panel(title, style="blue"))

    def _wait(self) -> None:
        if self.pause:
            Prompt.ask(
                "\nPress Enter to continue...",
                console=self.console,
                stream=self.stream,
                default="",
                show_default=False,
            )

    def _require_selected(self) -> MemberRecord | None:
        if self.selected is None:
            self.console.print(
                "No member selected. Please use option 2 to select a member first."
            )
        return self.selected

    def _persist(self, member: MemberRecord) -> None:
        result = self.registry.save_member(member)
        if result.is_err():
            self.console.print(
                f"Warning: change kept in memory only ({result.unwrap_err()})",
                style="yellow",
                markup=False,
            )

    def _print_summary(self, members: list[MemberRecord], empty_message: str = "") -> None:
        if not members:
            self.console.print(empty_message)
            return
        self.console.print(summary_header(), markup=False, highlight=False)
        self.console.print("-" * len(summary_header()), markup=False, highlight=False)
        for member in members:
            self.console.print(member.format_summary_line(), markup=False, highlight=False)

    def _print_details(self, member: MemberRecord) -> None:
        table = Table(title="HEALTH CENTRE MEMBER DETAILS", show_header=False)
        table.add_column("Field", style="cyan")
        table.add_column("Value", style="white")
        for label, value in member.details().items():
            table.add_row(label, value)
        self.console.print(table)


def main() -> None:
    """Console entry point: load configuration, open the store, run the menu."""
    config = get_config()
    configure_logging(config.logging.level, config.logging.format)
    console = Console()

    opened = SqlMemberStore.open(config.database)
    store: SqlMemberStore | None = None
    if opened.is_ok():
        store = opened.unwrap()
        store.ensure_schema()
    else:
        console.print(
            f"{opened.unwrap_err()}. Continuing with an empty in-memory register.",
            style="yellow",
            markup=False,
        )
    registry = MemberRegistry(store, config=config.registry, rules=config.rules)

    loaded = registry.load()
    if loaded.is_err():
        console.print(
            f"Error loading from {registry.store_name}: {loaded.unwrap_err()}. "
            "Continuing with an empty in-memory register.",
            style="yellow",
            markup=False,
        )
    elif store is not None:
        console.print(f"Database loaded: {loaded.unwrap()} members found.")

    try:
        MemberMenu(registry, console=console).run()
    except (KeyboardInterrupt, EOFError):
        console.print("\nGoodbye!", style="yellow")


if __name__ == "__main__":
    main()

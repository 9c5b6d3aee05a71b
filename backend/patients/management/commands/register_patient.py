"""
Drive the registration wizard from the command line.

Usage:
    python manage.py register_patient draft.json
    python manage.py register_patient draft.json --api-url http://localhost:8000/api/v1
    python manage.py register_patient draft.json --dismiss      # not the same person, continue
    python manage.py register_patient draft.json --select <id>  # use the existing patient
    python manage.py register_patient draft.json --bypass       # create anyway at the last step

draft.json holds RegistrationDraft fields (snake_case).
"""

import json

from django.core.management.base import BaseCommand, CommandError

from registration import Outcome, RegistrationConfig, RegistrationDraft, RegistrationError, RegistrationWizard
from registration.session import SessionContext
from registration.types import LAST_STEP
from registration.validation import step_of


class Command(BaseCommand):
    help = 'Register a patient through the five-step wizard against a running API'

    def add_arguments(self, parser):
        parser.add_argument('draft', help='Path to a JSON file with registration draft fields')
        parser.add_argument('--api-url', dest='api_url', help='Override REGISTRATION API_BASE_URL')
        parser.add_argument('--token', help='Bearer token sent with every request')
        decision = parser.add_mutually_exclusive_group()
        decision.add_argument('--select', dest='select_id', help='Open this existing patient if it is a candidate')
        decision.add_argument('--dismiss', action='store_true', help='Dismiss pre-check candidates and continue')
        parser.add_argument('--bypass', action='store_true', help='Create anyway if the server reports duplicates')

    def handle(self, *args, **options):
        try:
            with open(options['draft'], encoding='utf-8') as f:
                draft = RegistrationDraft.from_dict(json.load(f))
        except (OSError, ValueError, RegistrationError) as e:
            raise CommandError(f"Cannot load draft: {e}") from e

        config = RegistrationConfig.from_settings(api_base_url=options['api_url'])
        session = None
        if options['token']:
            session = SessionContext(options['token'], idle_timeout=config.session_idle_timeout).start()

        wizard = RegistrationWizard.from_config(config, session=session, draft=draft)
        try:
            self._run(wizard, options)
        except RegistrationError as e:
            raise CommandError(str(e)) from e
        finally:
            if session is not None:
                session.end()

        self.stdout.write(self.style.SUCCESS(f"Done: {wizard.redirect_to}"))

    def _run(self, wizard, options):
        while wizard.current_step < LAST_STEP and not wizard.closed:
            step = wizard.current_step
            outcome = wizard.advance()
            if outcome == Outcome.INVALID:
                self._fail_with_errors(wizard, f"Step {int(step)} ({wizard.step_label})")
            if outcome == Outcome.NEEDS_REVIEW:
                self._show_candidates(wizard)
                self._decide(wizard, options)

        if wizard.closed:
            return

        outcome = wizard.submit()
        if outcome == Outcome.INVALID:
            self._fail_with_errors(wizard, 'Submission')
        if outcome == Outcome.CONFLICT:
            self._show_candidates(wizard)
            if options['select_id']:
                wizard.select_existing(options['select_id'])
                return
            if not options['bypass']:
                raise CommandError(wizard.submit_error + ' Re-run with --bypass or --select <id>.')
            outcome = wizard.submit_with_bypass()
        if outcome != Outcome.CREATED:
            raise CommandError(wizard.submit_error or f"Registration did not complete ({outcome.value})")

    def _decide(self, wizard, options):
        if options['select_id']:
            wizard.select_existing(options['select_id'])
        elif options['dismiss']:
            wizard.dismiss_alert()
        else:
            raise CommandError('Possible duplicate patients found. Re-run with --dismiss or --select <id>.')

    def _show_candidates(self, wizard):
        self.stdout.write(self.style.WARNING('Possible duplicate patients:'))
        for candidate, line in zip(wizard.alert.candidates, wizard.alert.render_lines()):
            self.stdout.write(f"  {candidate.id}  {line}")

    def _fail_with_errors(self, wizard, where):
        lines = [f"{where} failed validation:"]
        for name, message in sorted(wizard.errors.items()):
            step = step_of(name)
            where_field = f"{name} ({step.label})" if step else name
            lines.append(f"  {where_field}: {message}")
        raise CommandError('\n'.join(lines))

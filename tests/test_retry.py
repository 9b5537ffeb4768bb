"""Tests for RetryPolicy decisions.

Tests verify:
1. abort and warn policies never prompt
2. interactive answers map to retry/skip/abort
3. invalid answers re-prompt
4. a non-interactive input stream fails instead of hanging
"""

import io

import pytest

from fedora_provisioner.errors import ConfigurationError
from fedora_provisioner.retry import FailurePolicy, RetryDecision, RetryPolicy


def scripted(text):
    out = io.StringIO()
    return RetryPolicy(stdin=io.StringIO(text), stdout=out, assume_interactive=True), out


class TestNonInteractivePolicies:
    """abort / warn-and-continue."""

    def test_abort_on_first_failure(self):
        """abort policy should abort immediately."""
        policy, out = scripted('')
        assert policy.decide(FailurePolicy.ABORT, 1, 'boom') is RetryDecision.ABORT
        assert out.getvalue() == ''

    def test_warn_skips_and_logs(self, caplog):
        """warn-and-continue should skip and leave a warning."""
        policy, out = scripted('')
        with caplog.at_level('WARNING'):
            decision = policy.decide(FailurePolicy.WARN, 1, 'mirror timeout')
        assert decision is RetryDecision.SKIP
        assert 'mirror timeout' in caplog.text
        assert out.getvalue() == ''

    def test_accepts_policy_value_strings(self):
        """Policy may be passed by its string value."""
        policy, _ = scripted('')
        assert policy.decide('warn-and-continue', 1, None) is RetryDecision.SKIP


class TestInteractivePolicy:
    """Operator prompt."""

    @pytest.mark.parametrize('answer,expected', [
        ('t\n', RetryDecision.RETRY),
        ('retry\n', RetryDecision.RETRY),
        ('Try\n', RetryDecision.RETRY),
        ('s\n', RetryDecision.SKIP),
        ('skip\n', RetryDecision.SKIP),
        ('q\n', RetryDecision.ABORT),
        ('quit\n', RetryDecision.ABORT),
    ])
    def test_answers(self, answer, expected):
        """First letter of the answer decides."""
        policy, out = scripted(answer)
        assert policy.decide(FailurePolicy.INTERACTIVE, 1, 'err') is expected
        assert 't/s/q' in out.getvalue()

    def test_invalid_input_reprompts(self):
        """Invalid answers re-prompt until a valid one arrives."""
        policy, out = scripted('maybe\n\ns\n')
        assert policy.decide(FailurePolicy.INTERACTIVE, 1, 'err') is RetryDecision.SKIP
        assert out.getvalue().count('Invalid choice') == 2

    def test_sequential_decisions_consume_input_in_order(self):
        """Each decide() call reads the next answer."""
        policy, _ = scripted('r\nr\ns\n')
        decisions = [policy.decide(FailurePolicy.INTERACTIVE, n, 'err') for n in (1, 2, 3)]
        assert decisions == [RetryDecision.RETRY, RetryDecision.RETRY, RetryDecision.SKIP]

    def test_not_a_tty_raises_configuration_error(self):
        """StringIO is not a TTY, so without assume_interactive this must fail."""
        policy = RetryPolicy(stdin=io.StringIO('s\n'), stdout=io.StringIO())
        with pytest.raises(ConfigurationError):
            policy.decide(FailurePolicy.INTERACTIVE, 1, 'err')

    def test_eof_raises_configuration_error(self):
        """Closed input while prompting must not loop forever."""
        policy, _ = scripted('')
        with pytest.raises(ConfigurationError):
            policy.decide(FailurePolicy.INTERACTIVE, 1, 'err')

    def test_downgrade_turns_prompt_into_skip(self):
        """--on-failure warn makes interactive operations warn-and-continue."""
        policy = RetryPolicy(stdin=io.StringIO(''), stdout=io.StringIO(), downgrade_interactive=True)
        assert policy.decide(FailurePolicy.INTERACTIVE, 1, 'err') is RetryDecision.SKIP

    def test_downgrade_leaves_abort_alone(self):
        """Downgrading never softens an abort policy."""
        policy = RetryPolicy(downgrade_interactive=True)
        assert policy.decide(FailurePolicy.ABORT, 1, 'err') is RetryDecision.ABORT

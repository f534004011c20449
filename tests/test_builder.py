"""Tests pour le constructeur de lignes de commande."""

import shlex
from unittest.mock import MagicMock

import pytest

from async_tools.commands import (
    Argument,
    Command,
    CommandLineBuilder,
    build_command_line,
    escape_command,
)
from async_tools.logging.base import Logger
from async_tools.logging.diagnostics import DiagnosticReporter


# --- Tests escape_command ---


class TestEscapeCommand:
    """Tests pour la protection du programme."""

    def test_espaces_conserves(self):
        """Les espaces séparent toujours programme et arguments."""
        assert escape_command("echo hello") == "echo hello"

    def test_point_virgule_protege(self):
        """Un ; ne peut pas enchaîner une seconde commande."""
        assert escape_command("echo a; rm x") == "echo a\\; rm x"

    def test_metacaracteres_proteges(self):
        """Chaque métacaractère est précédé d'un backslash."""
        escaped = escape_command("a|b&c$d`e`")
        assert escaped == "a\\|b\\&c\\$d\\`e\\`"

    def test_backslash_protege(self):
        """Le backslash lui-même est protégé."""
        assert escape_command("a\\b") == "a\\\\b"

    def test_guillemets_apparies_conserves(self):
        """Une paire d'apostrophes ou de guillemets est conservée."""
        assert escape_command("echo 'a b'") == "echo 'a b'"
        assert escape_command('echo "a b"') == 'echo "a b"'

    def test_guillemet_isole_protege(self):
        """Une apostrophe sans partenaire est protégée."""
        assert escape_command("echo it's") == "echo it\\'s"
        assert escape_command("echo 'a' b'") == "echo 'a' b\\'"

    def test_guillemet_imbrique_protege(self):
        """Un guillemet dans une paire d'apostrophes est protégé."""
        assert escape_command("echo 'a\"b'") == "echo 'a\\\"b'"

    def test_metacaractere_entre_guillemets(self):
        """Un ; reste protégé entre guillemets."""
        assert escape_command('echo "a;b"') == 'echo "a\\;b"'


# --- Tests Argument / Command ---


class TestArgument:
    """Tests pour la dataclass Argument."""

    def test_positionnel(self):
        """Un argument positionnel a une clé et une liaison vides."""
        arg = Argument.positional("x")
        assert arg.key == ""
        assert arg.glue == ""
        assert arg.value == "x"

    def test_from_mapping(self):
        """Création depuis un dict {key, glue, value}."""
        arg = Argument.from_mapping({"key": "-n", "glue": " ", "value": 5})
        assert arg == Argument("-n", " ", 5)

    def test_is_scalar(self):
        """Les listes et dicts ne sont pas scalaires."""
        assert Argument(value=3).is_scalar
        assert Argument(value=None).is_scalar
        assert not Argument(value=["a"]).is_scalar
        assert not Argument(value={"a": 1}).is_scalar

    def test_frozen(self):
        """Test que la dataclass est immuable."""
        arg = Argument("--x")
        with pytest.raises(AttributeError):
            arg.key = "--y"


class TestCommand:
    """Tests pour la dataclass Command."""

    def test_normalise_les_dicts(self):
        """Les arguments fournis en dict deviennent des Argument."""
        command = Command("ls", ({"key": "-l"},))
        assert command.arguments == (Argument("-l"),)

    def test_programme_vide_leve_erreur(self):
        """Test qu'un programme vide lève ValueError."""
        with pytest.raises(ValueError):
            Command("  ")


# --- Tests CommandLineBuilder ---


class TestCommandLineBuilder:
    """Tests pour CommandLineBuilder."""

    def setup_method(self):
        """Initialise un reporter branché sur un logger mocké."""
        self.mock_logger = MagicMock(spec=Logger)
        self.reporter = DiagnosticReporter(self.mock_logger)

    def test_programme_seul(self):
        """Test de build avec le programme seul."""
        assert CommandLineBuilder("ls").build() == "ls"

    def test_flag_sans_valeur(self):
        """Un flag n'émet que sa clé."""
        line = CommandLineBuilder("ls", [Argument("-l")]).build()
        assert line == "ls -l"

    def test_option_avec_liaison(self):
        """La valeur suit immédiatement clé et liaison."""
        line = CommandLineBuilder(
            "prog", [Argument("--out", "=", "a b")]
        ).build()
        assert line == "prog --out='a b'"

    def test_option_liaison_espace(self):
        """Une liaison espace produit deux mots shell."""
        line = build_command_line(
            "prog", [{"key": "-n", "glue": " ", "value": 5}]
        )
        assert line == "prog -n 5"

    def test_valeur_fausse_omise(self):
        """Une valeur fausse ou vide n'est pas émise."""
        line = build_command_line("prog", [
            Argument("--a", "=", False),
            Argument("--b", "=", ""),
            Argument("--c", "=", None),
            Argument("--d", "=", 0),
        ])
        assert line == "prog --a= --b= --c= --d="

    def test_valeur_true(self):
        """True est émis comme 1."""
        line = build_command_line("prog", [Argument("--x", "=", True)])
        assert line == "prog --x=1"

    def test_valeur_avec_metacaracteres(self):
        """Une valeur dangereuse reste un seul mot littéral."""
        line = build_command_line("echo", [Argument(value="; rm -rf /")])
        assert shlex.split(line) == ["echo", "; rm -rf /"]

    def test_valeur_non_scalaire_signalee(self):
        """Une liste est signalée puis convertie en texte."""
        line = CommandLineBuilder(
            "prog",
            [Argument("--list", "=", ["a", "b"])],
            reporter=self.reporter,
        ).build()

        assert shlex.split(line) == ["prog", "--list=['a', 'b']"]
        self.mock_logger.log_warning.assert_called_once()
        message = self.mock_logger.log_warning.call_args[0][0]
        assert "argument.non_scalar" in message
        assert "--list" in message

    def test_chainage_complet(self):
        """Test du chaînage fluent complet."""
        line = (
            CommandLineBuilder("rsync")
            .with_flag("-av")
            .with_option("--compress-level", 3)
            .with_argument(Argument("--exclude", " ", "*.tmp"))
            .with_args(["/src/", "/dest dir/"])
            .build()
        )
        assert line == (
            "rsync -av --compress-level=3 --exclude '*.tmp' "
            "/src/ '/dest dir/'"
        )

    def test_command_immuable(self):
        """command() retourne une Command équivalente."""
        builder = CommandLineBuilder("ls").with_flag("-l")
        command = builder.command()
        assert command == Command("ls", (Argument("-l"),))
        assert CommandLineBuilder.from_command(command).build() == "ls -l"

    def test_programme_vide_leve_erreur(self):
        """Test qu'un programme vide lève ValueError."""
        with pytest.raises(ValueError):
            CommandLineBuilder("")

    def test_programme_protege(self):
        """Le programme est protégé comme escape_command."""
        line = build_command_line("echo a;b", [Argument(value="c")])
        assert line == "echo a\\;b c"

from invoke import task
from pathlib import Path

# Get project root directory
PROJECT_ROOT = Path(__file__).parent.absolute()


def project_relative(path):
    """Convert a relative path to an absolute path relative to the project root."""
    return str(PROJECT_ROOT / path)


@task
def update(c):
    """Update all dependencies to their latest versions using poetry."""
    c.run("poetry update")


@task
def up(c):
    """Alias for update - update all dependencies to their latest versions."""
    update(c)


@task
def status(c):
    """Check git status of the repository."""
    c.run("git status")


@task
def st(c):
    """Alias for status - check git status of the repository."""
    status(c)


@task
def test(c, path=None):
    """Run the tests. Optionally specify a dotted test path."""
    if path:
        c.run(f"python -m unittest {path}")
    else:
        c.run(f"python -m unittest discover -s {project_relative('vbcompetitions')} -t {PROJECT_ROOT}")


@task
def validate(c, file):
    """Check a competition file and print any errors."""
    c.run(f"python -m vbcompetitions.cli validate {file}")


@task
def table(c, file, stage, group):
    """Print a league table from a competition file."""
    c.run(f"python -m vbcompetitions.cli table {file} {stage} {group}")


@task
def seed(c, file, teams=6, results=False):
    """Write a random round-robin league to a competition file."""
    flags = " --results" if results else ""
    c.run(f"python -m vbcompetitions.cli seed {file} --teams {teams}{flags}")

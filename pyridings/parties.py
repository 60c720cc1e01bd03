"""
Resolves the party names printed in results files to canonical parties.

Party names vary by year and by official language.  This module holds
the single normalization table where every known variant is registered.
A name missing from the table is an error rather than a best guess.

"""

from collections import namedtuple
import logging

from pyridings.errors import InputReadError, ParseError, QueryError, UnknownPartyError


# Bump this when the canonical codes or the aliases below change.
TABLE_VERSION = "2021.2"

Party = namedtuple("Party", ("code", "name"))

# This string contains the canonical parties, one per line, in the
# form CODE:Display name.
PARTIES = """
LIB:Liberal
CON:Conservative
NDP:New Democratic Party
BLQ:Bloc Québécois
GRN:Green Party
PPC:People's Party of Canada
COM:Communist
IND:Independent
NOA:No Affiliation
CHP:Christian Heritage Party
LBT:Libertarian
MLP:Marxist-Leninist
RHI:Rhinoceros
APP:Animal Protection Party
VCP:Veterans Coalition Party
MAR:Marijuana Party
PCP:Progressive Canadian Party
PIQ:Parti pour l'Indépendance du Québec
NCA:National Citizens Alliance
MAV:Maverick Party
FPC:Free Party Canada
CEN:Centrist Party
PIR:Pirate Party
CAP:Canadian Action Party
SID:Strength in Democracy
DAP:Democratic Advancement
UPC:United Party of Canada
"""

# This string maps the party names as printed in the English and French
# columns of the results files to canonical codes, one per line, in the
# form raw name:CODE.
PARTY_ALIASES = """
Liberal:LIB
Libéral:LIB
Conservative:CON
Conservateur:CON
NDP-New Democratic Party:NDP
NPD-Nouveau Parti démocratique:NDP
Bloc Québécois:BLQ
Green Party:GRN
Parti Vert:GRN
People's Party:PPC
People's Party - PPC:PPC
Parti populaire:PPC
Parti populaire - PPC:PPC
Communist:COM
Communiste:COM
Independent:IND
Indépendant(e):IND
Indépendant:IND
No Affiliation:NOA
Aucune appartenance:NOA
Christian Heritage Party:CHP
CHP Canada:CHP
Parti de l'Héritage Chrétien:CHP
PHC Canada:CHP
Libertarian:LBT
Libertarien:LBT
Marxist-Leninist:MLP
Marxiste-Léniniste:MLP
Rhinoceros:RHI
Rhinocéros:RHI
Animal Protection Party:APP
Parti pour la Protection des Animaux:APP
Animal Alliance/Environment Voters:APP
Alliance animale/Électeurs pour l'environnement:APP
Veterans Coalition Party:VCP
Parti de la coalition des anciens combattants:VCP
Marijuana Party:MAR
Parti Marijuana:MAR
Progressive Canadian Party:PCP
Parti progressiste canadien:PCP
Parti pour l'Indépendance du Québec:PIQ
National Citizens Alliance:NCA
Alliance nationale des citoyens:NCA
Maverick Party:MAV
Parti Maverick:MAV
Free Party Canada:FPC
Parti Libre Canada:FPC
Centrist:CEN
Parti Centriste:CEN
Pirate Party:PIR
Parti Pirate:PIR
Canadian Action:CAP
Action canadienne:CAP
Strength in Democracy:SID
Forces et Démocratie:SID
Democratic Advancement:DAP
Avancement de la démocratie:DAP
United Party:UPC
Parti Uni:UPC
"""

log = logging.getLogger("pyridings")


def normalize_party_name(raw_name):
    """
    Return the lookup key for a raw party name.

    Whitespace is trimmed and collapsed, case is folded, and the
    typographic apostrophe is treated as a plain one.

    """
    name = raw_name.replace("’", "'")
    return " ".join(name.split()).casefold()


def iter_table_lines(text):
    """Yield the non-blank, non-comment lines of a table string."""
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        yield line


def split_alias_line(line):
    # Party names never contain a colon but may be followed by one.
    raw_name, sep, code = line.rpartition(":")
    if not sep or not raw_name.strip() or not code.strip():
        raise ValueError("expected a line of the form 'raw name:CODE': %r" % line)
    return raw_name, code.strip()


class PartyTable(object):

    """
    Maps raw party names to canonical Party values.

    Attributes:
      parties: a dict of party code to Party, in table order.
      aliases: a dict of normalized raw name to Party.

    """

    def __init__(self, parties=(), version=TABLE_VERSION):
        self.version = version
        self.parties = {}
        self.aliases = {}
        for party in parties:
            self.parties[party.code] = party

    def __repr__(self):
        return ("<PartyTable object: version=%r, %d parties, %d aliases>" %
                (self.version, len(self.parties), len(self.aliases)))

    def __iter__(self):
        return iter(self.parties.values())

    def __contains__(self, code):
        return code in self.parties

    def get(self, code):
        """Return the Party for a party code, or raise QueryError."""
        try:
            return self.parties[code.upper()]
        except KeyError:
            raise QueryError("unknown party code: %r" % code)

    def add_alias(self, raw_name, code):
        try:
            party = self.parties[code]
        except KeyError:
            raise ValueError("alias %r names an unknown party code: %r" % (raw_name, code))
        key = normalize_party_name(raw_name)
        old_party = self.aliases.get(key)
        if old_party is not None and old_party != party:
            raise ValueError("alias %r already maps to: %s" % (raw_name, old_party.code))
        self.aliases[key] = party

    def add_aliases(self, text):
        for line in iter_table_lines(text):
            raw_name, code = split_alias_line(line)
            self.add_alias(raw_name, code)

    def load_aliases(self, path):
        """
        Register the extra aliases in a site file.

        The file has the same "raw name:CODE" format as PARTY_ALIASES,
        and may contain blank lines and "#" comments.

        """
        log.info("loading party aliases: %s" % path)
        try:
            f = open(path, "r", encoding="utf-8")
        except OSError as err:
            raise InputReadError("cannot open party aliases: %s" % err.strerror, path=path)
        with f:
            for line_no, line in enumerate(f, start=1):
                line = line.strip()
                if not line or line.startswith("#"):
                    continue
                try:
                    raw_name, code = split_alias_line(line)
                    self.add_alias(raw_name, code)
                except ValueError as err:
                    raise ParseError(str(err), path=path, line_no=line_no)

    def resolve(self, raw_name):
        """Return the Party for a raw party name, or raise UnknownPartyError."""
        try:
            return self.aliases[normalize_party_name(raw_name)]
        except KeyError:
            raise UnknownPartyError(raw_name)


def make_parties(text=PARTIES):
    """Return a list of the Party values in a table string."""
    parties = []
    for line in iter_table_lines(text):
        code, name = line.split(":", 1)
        parties.append(Party(code=code.strip(), name=name.strip()))
    return parties


def make_party_table(alias_paths=()):
    """
    Return the default PartyTable, extended with any alias files.

    """
    table = PartyTable(make_parties())
    table.add_aliases(PARTY_ALIASES)
    for path in alias_paths:
        table.load_aliases(path)
    log.debug("party table: %r" % table)
    return table

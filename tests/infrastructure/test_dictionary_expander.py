"""Tests for DictionarySynonymExpander."""

import json

from chunksearch.core.protocols.synonym_expander import SynonymExpanderProtocol
from chunksearch.infrastructure.synonyms.dictionary_expander import DictionarySynonymExpander


class TestDictionarySynonymExpander:
    def test_direct_synonyms(self) -> None:
        expander = DictionarySynonymExpander(mappings={"운동시설": ["체육시설", "체육관"]})
        assert expander.expand(["운동시설"]) == sorted(["운동시설", "체육시설", "체육관"])

    def test_partial_match_includes_term(self) -> None:
        """A keyword containing a dictionary term pulls in that term's synonyms."""
        expander = DictionarySynonymExpander(mappings={"금연": ["흡연금지"]})
        assert expander.expand(["금연구역"]) == sorted(["금연구역", "금연", "흡연금지"])

    def test_unknown_keyword_returned_unchanged(self) -> None:
        expander = DictionarySynonymExpander(mappings={"공원": ["녹지"]})
        assert expander.expand(["과태료", ""]) == ["과태료"]

    def test_output_is_superset_of_input(self) -> None:
        expander = DictionarySynonymExpander(mappings={"공원": ["녹지"]})
        keywords = ["공원", "놀이터"]
        assert set(keywords) <= set(expander.expand(keywords))

    def test_loads_domain_grouped_file(self, tmp_path) -> None:
        path = tmp_path / "synonyms.json"
        path.write_text(
            json.dumps(
                {"health": {"금연구역": ["흡연금지구역"]}, "sports": {"운동시설": ["체육시설"]}},
                ensure_ascii=False,
            ),
            encoding="utf-8",
        )
        expander = DictionarySynonymExpander(str(path), mappings={"금연구역": ["금연장소"]})

        assert expander.size == 2
        assert expander.expand(["금연구역"]) == sorted(["금연구역", "흡연금지구역", "금연장소"])

    def test_missing_file_disables_expansion(self, tmp_path) -> None:
        expander = DictionarySynonymExpander(str(tmp_path / "missing.json"))
        assert expander.size == 0
        assert expander.expand(["공원"]) == ["공원"]

    def test_satisfies_protocol(self) -> None:
        assert isinstance(DictionarySynonymExpander(), SynonymExpanderProtocol)

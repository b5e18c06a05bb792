"""
tagging_service.py — Keyword-based topic tags
A topic is assigned when enough of its keywords appear in the text
(case-insensitive substring match).
"""

TOPIC_KEYWORDS = [
    ("computer science", ["algorithm", "programming", "code", "data structure", "software", "database", "web", "network"]),
    ("biology", ["cell", "organism", "species", "evolution", "dna", "rna", "protein", "gene", "ecology"]),
    ("chemistry", ["reaction", "molecule", "atom", "compound", "element", "periodic", "acid", "base", "organic"]),
    ("physics", ["force", "energy", "motion", "quantum", "relativity", "particle", "wave", "mechanics", "thermodynamics"]),
    ("mathematics", ["equation", "theorem", "proof", "calculus", "algebra", "geometry", "statistics", "probability"]),
    ("history", ["war", "revolution", "century", "ancient", "medieval", "empire", "civilization", "president", "king"]),
    ("literature", ["novel", "poem", "author", "character", "theme", "plot", "narrative", "essay", "fiction"]),
    ("psychology", ["behavior", "cognitive", "therapy", "mental", "emotion", "brain", "consciousness", "development"]),
    ("economics", ["market", "price", "demand", "supply", "inflation", "gdp", "economy", "trade", "fiscal"]),
    ("philosophy", ["ethics", "metaphysics", "epistemology", "logic", "existentialism", "knowledge", "reality"]),
    ("art", ["painting", "sculpture", "artist", "museum", "gallery", "composition", "aesthetic", "visual"]),
    ("music", ["song", "rhythm", "melody", "harmony", "composer", "instrument", "chord", "scale", "tempo"]),
    ("medicine", ["disease", "treatment", "symptom", "diagnosis", "patient", "hospital", "drug", "surgery"]),
    ("environmental science", ["climate", "ecosystem", "pollution", "conservation", "sustainability", "renewable"]),
    ("astronomy", ["planet", "star", "galaxy", "universe", "cosmic", "solar", "telescope", "orbit", "nebula"]),
    ("geology", ["rock", "mineral", "earthquake", "volcano", "plate", "tectonic", "sediment", "erosion"]),
    ("political science", ["government", "policy", "election", "democracy", "constitution", "law", "rights"]),
    ("sociology", ["society", "culture", "social", "class", "inequality", "gender", "race", "ethnicity"]),
    ("anthropology", ["culture", "ritual", "tradition", "kinship", "ethnography", "archaeology", "tribe"]),
    ("linguistics", ["language", "grammar", "syntax", "semantics", "phonetics", "dialect", "morphology"]),
    ("education", ["learning", "teaching", "student", "school", "curriculum", "assessment", "pedagogy"]),
    ("computer network", ["tcp", "ip", "protocol", "router", "packet", "ethernet", "wifi", "lan", "wan"]),
    ("data science", ["machine learning", "ai", "neural network", "data mining", "big data", "analytics"]),
    ("cybersecurity", ["encryption", "authentication", "firewall", "malware", "virus", "hack", "vulnerability"]),
    ("dna", ["gene", "allele", "chromosome", "genome", "nucleotide", "mutation", "helix", "replication"]),
    ("cell", ["membrane", "nucleus", "mitochondria", "organelle", "cytoplasm", "ribosome", "golgi"]),
    ("algorithm", ["sorting", "search", "complexity", "recursive", "optimization", "graph", "tree", "dynamic"]),
    ("database", ["sql", "query", "table", "index", "relational", "nosql", "schema", "transaction", "acid"]),
    ("acid", ["ph", "base", "proton", "hydrogen", "acidity", "hydroxide", "buffer", "neutralization"]),
]


def required_matches(keywords: list[str]) -> int:
    # Short keyword lists only need a single hit
    return 1 if len(keywords) <= 3 else 2


def generate_tags(text: str | None) -> list[str]:
    """Topic tags for a document, in table order."""
    lowered = (text or "").lower()
    if not lowered:
        return []

    tags = []
    for tag, keywords in TOPIC_KEYWORDS:
        matches = sum(1 for keyword in keywords if keyword in lowered)
        if matches >= required_matches(keywords):
            tags.append(tag)
    return tags

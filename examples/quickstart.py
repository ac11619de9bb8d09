"""Quick start: a persistent vector store in a few steps.

Builds a store, inserts a handful of documents, queries it, saves the index to
its collection and loads it back into a fresh store.
"""

import tempfile

import numpy as np

from hnswstore import HNSWStoreConfig, VectorStore


def main():
    print("=" * 60)
    print("HNSWStore Quick Start")
    print("=" * 60)

    rng = np.random.default_rng(7)
    documents = [
        "HNSW builds a layered proximity graph",
        "Upper layers are sparse and allow long jumps",
        "The bottom layer holds every vector",
        "Queries descend greedily from the entry point",
        "Snapshots are plain JSON documents",
    ]
    embeddings = rng.random((len(documents), 16)).astype(np.float32)

    with tempfile.TemporaryDirectory() as directory:
        # Step 1: Create the store
        print("\n1. Creating store...")
        config = HNSWStoreConfig(default_k=3, seed=7)
        store = VectorStore.create("quickstart", config=config, directory=directory)
        print(f"   Collection: {store.collection_name}")

        # Step 2: Insert documents
        print("\n2. Inserting documents...")
        store.build_index(
            {"id": i + 1, "embedding": embeddings[i], "content": text}
            for i, text in enumerate(documents)
        )
        print(f"   Indexed {store.size()} documents")

        # Step 3: Query
        print("\n3. Querying...")
        for rank, hit in enumerate(store.query(embeddings[0]), 1):
            print(f"   {rank}. [{hit.id}] {hit.content} (score: {hit.score:.4f})")

        # Step 4: Save and reload
        print("\n4. Saving and reloading...")
        store.save_index()
        store.close()

        with VectorStore.create("quickstart", config=config, directory=directory) as restored:
            restored.load_index()
            print(f"   Restored {restored.size()} documents")
            top = restored.query(embeddings[0], k=1)[0]
            print(f"   Top hit after reload: [{top.id}] {top.content}")

            stats = restored.get_statistics()
            print(f"   Max level: {stats['max_level']}, entry point: {stats['entry_point_id']}")

    print("\n" + "=" * 60)
    print("Quick Start Complete!")
    print("=" * 60)


if __name__ == "__main__":
    main()

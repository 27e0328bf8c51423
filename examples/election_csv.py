"""
CSV example: election results whose column names span two rows.

This example demonstrates:
- Merging the party row and the measure row into one header
- Naming the two repeated 'Gebiet' columns
- Reading German number formats
- Pivoting longer and splitting labels into vote and measure
"""
import logging

from blog_posts import election_post


def main():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    csv_file = "data/csv/btw21_kerg.csv"

    result = election_post.run(
        source=csv_file,
        header_skip=4,                      # title lines above the header
        id_columns=["gebiet_nr", "gebiet"],
        workdir="data/csv",
        sep=";",
        header_overrides={0: "gebiet_nr"},  # first 'Gebiet' column holds the number
        filter_column="gebiet",
        keep=["Flensburg – Schleswig", "Nordfriesland – Dithmarschen Nord", "Bund"],
        decimal=",",
        thousands=".",
        templates=["{vote}_{measure}"],
        plot_x="gebiet",
        plot_hue="vote",
        output_path="output/btw21_votes.png",
    )

    print(f"Merged header: {result['header']}")
    print(result["table"].head())
    print(f"\nLong table: {len(result['long'])} rows")
    print(result["long"].head(8))


if __name__ == "__main__":
    main()

"""AUR パッケージのビルドとローカル pacman リポジトリへの公開."""

__version__ = "0.1.0"
